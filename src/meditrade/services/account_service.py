"""Account registration and lookup."""
import logging
from decimal import Decimal

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from meditrade.core.exceptions import AccountExists, PersistenceError
from meditrade.db.models import Account, AccountHolding
from meditrade.db.sessions import get_session
from meditrade.services.repository import load_account, load_holdings

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, engine: Engine, starting_balance: Decimal) -> None:
        self._engine = engine
        self._starting_balance = starting_balance

    def register(self, name: str, email: str, role: str = "user") -> Account:
        """Create an account funded with the starting balance."""
        email = email.strip().lower()
        try:
            with get_session(self._engine) as session:
                if session.exec(select(Account).where(Account.email == email)).first():
                    raise AccountExists("User already exists")
                account = Account(
                    name=name, email=email, role=role, balance=self._starting_balance
                )
                session.add(account)
        except PersistenceError as exc:
            # Lost a race with a concurrent registration for the same email.
            if isinstance(exc.__cause__, IntegrityError):
                raise AccountExists("User already exists") from exc
            raise
        logger.info("Registered account %s (%s)", account.id, role)
        return account

    def get(self, user_id: int) -> tuple[Account, list[AccountHolding]]:
        with get_session(self._engine) as session:
            account = load_account(session, user_id)
            return account, load_holdings(session, account.id)
