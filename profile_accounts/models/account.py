"""
Account Model

In-memory view of one user's profile. An Account is built by the
AccountManager for a single read-modify-write cycle and is never cached
or shared. It does no I/O and no validation.
"""

from typing import Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from profile_accounts.models.property import (
    AccountProperty,
    PropertyCollection,
    Scope,
    VerificationStatus,
    is_collection,
)


class PropertyNotFoundError(KeyError):
    """The requested attribute is not present on the account."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Property {self.name} does not exist"


class AccountUser(BaseModel):
    """
    The authenticated identity owning an account.

    Only the fields needed to build a default record are modelled.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    uid: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Unique user identifier"
    )
    display_name: str = Field(
        default="",
        description="Display name from the user backend"
    )
    email: Optional[str] = Field(
        default=None,
        description="Primary e-mail address from the user backend"
    )


class Account:
    """
    Ordered mapping of attribute name to a property or a collection.

    Attribute names keep their insertion order; get_all_properties()
    yields scalar properties first, then collection elements.
    """

    def __init__(self, user: AccountUser):
        self.user = user
        self._properties: dict[str, Union[AccountProperty, PropertyCollection]] = {}

    def set_property(
        self,
        name: str,
        value: str,
        scope: str,
        verified: VerificationStatus = VerificationStatus.NOT_VERIFIED,
        verification_data: str = "",
    ) -> "Account":
        if is_collection(name):
            raise ValueError(f"{name} is a collection, use add_to_collection()")
        self._properties[name] = AccountProperty(
            name=name,
            value=value,
            scope=scope,
            verified=verified,
            verification_data=verification_data,
        )
        return self

    def get_property(self, name: str) -> AccountProperty:
        prop = self._properties.get(name)
        if not isinstance(prop, AccountProperty):
            raise PropertyNotFoundError(name)
        return prop

    def get_properties(self) -> dict[str, AccountProperty]:
        """Scalar properties only."""
        return {
            name: prop
            for name, prop in self._properties.items()
            if isinstance(prop, AccountProperty)
        }

    def get_property_collection(self, name: str) -> PropertyCollection:
        if not is_collection(name):
            raise ValueError(f"{name} is not a collection attribute")
        collection = self._properties.get(name)
        if collection is None:
            collection = PropertyCollection(name)
            self._properties[name] = collection
        return collection

    def set_property_collection(self, collection: PropertyCollection) -> "Account":
        if not is_collection(collection.name):
            raise ValueError(f"{collection.name} is not a collection attribute")
        self._properties[collection.name] = collection
        return self

    def add_to_collection(self, name: str, prop: AccountProperty) -> "Account":
        self.get_property_collection(name).add_property(prop)
        return self

    def get_all_properties(self) -> Iterator[AccountProperty]:
        collections = []
        for prop in self._properties.values():
            if isinstance(prop, PropertyCollection):
                collections.append(prop)
            else:
                yield prop
        for collection in collections:
            yield from collection

    def get_filtered_properties(
        self,
        scope: Optional[Scope] = None,
        verified: Optional[VerificationStatus] = None,
    ) -> list[AccountProperty]:
        """All properties matching the given scope and/or verification status."""
        result = []
        for prop in self.get_all_properties():
            if scope is not None and prop.scope != scope.value:
                continue
            if verified is not None and prop.verified != verified:
                continue
            result.append(prop)
        return result

    def to_dict(self) -> dict:
        return {
            name: prop.to_list() if isinstance(prop, PropertyCollection) else prop.to_dict()
            for name, prop in self._properties.items()
        }

    def __contains__(self, name: str) -> bool:
        return name in self._properties
