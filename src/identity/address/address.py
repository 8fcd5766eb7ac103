"""Address records and the address book used by checkout."""

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Integer, String

from identity.domain import identity, logger
from shared.exceptions import Forbidden, NotFound
from shared.identity import GuestIdentity, UserIdentity, owns


@identity.aggregate
class Address:
    """A postal address owned by a registered user or by a guest session."""

    user_id = Integer(min_value=1)
    session_token = String(max_length=255)
    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    address_line1 = String(required=True, max_length=200)
    address_line2 = String(max_length=200)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone_number = String(max_length=20, default="")
    email = String(max_length=255)

    @invariant.post
    def address_must_have_exactly_one_owner(self):
        if (self.user_id is None) == (not self.session_token):
            raise ValidationError({"owner": ["An address belongs to a user or to a guest session"]})

    def snapshot(self) -> dict:
        """Frozen copy embedded in an order, independent of later edits."""
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
            "phone_number": self.phone_number,
        }

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@identity.repository(part_of=Address)
class AddressBook:
    def get_address(self, address_id, owner: UserIdentity | GuestIdentity, field: str = "address_id") -> Address:
        """Return the address if it exists and belongs to ``owner``."""
        try:
            address = self.get(address_id)
        except ObjectNotFoundError:
            raise NotFound({field: ["Address not found"]}) from None
        if not owns(owner, address.user_id, address.session_token):
            logger.warning("address_access_denied", address_id=address_id, owner=str(owner))
            raise Forbidden({field: ["Address does not belong to you"]})
        return address

    def add_for(self, owner: UserIdentity | GuestIdentity, **fields) -> Address:
        return self.add(Address(**owner.owner, **fields))
