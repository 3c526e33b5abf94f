"""Repository for the Account aggregate."""

from tracking.account.account import Account
from tracking.domain import tracking

# Upper bound for unpaginated reads; the query layer applies its own default otherwise
LISTING_LIMIT = 10_000


@tracking.repository(part_of=Account)
class AccountRepository:
    def find_by_external_id(self, external_id: str) -> Account | None:
        """Return the account bound to an identity-provider principal, if any."""
        results = self._dao.query.filter(external_id=external_id).all().items
        return results[0] if results else None

    def list_all(self) -> list[Account]:
        return self._dao.query.limit(LISTING_LIMIT).all().items

    def emails_by_id(self, account_ids=None) -> dict[str, str]:
        """Map account id to email, restricted to ``account_ids`` when given."""
        wanted = {str(account_id) for account_id in account_ids} if account_ids is not None else None
        return {
            str(account.id): account.email_address
            for account in self.list_all()
            if wanted is None or str(account.id) in wanted
        }

    def remove(self, account: Account) -> None:
        self._dao.delete(account)
