import pytest

from conftest import make_quote
from src.models.portfolio import AlertCondition, TransactionType
from src.services.alert_service import AlertService
from src.services.auth_service import AuthService
from src.services.portfolio_service import PortfolioService
from src.services.watchlist_service import WatchlistService
from src.utils.errors import InvalidInputError, NotFoundError


@pytest.fixture
def user(store):
    return AuthService(store).login("Alice@Example.com", "Alice")


class TestAuthService:
    def test_login_creates_then_reuses(self, store):
        auth = AuthService(store)
        first = auth.login("bob@example.com", "Bob")
        second = auth.login("BOB@example.com")
        assert first.id == second.id
        assert second.name == "Bob"
        assert auth.get_user(first.id).email == "bob@example.com"

    def test_default_name_from_email(self, store):
        assert AuthService(store).login("carol@example.com").name == "carol"

    def test_invalid_email(self, store):
        with pytest.raises(InvalidInputError):
            AuthService(store).login("not-an-email")

    def test_unknown_user(self, store):
        assert AuthService(store).get_user("missing") is None


class TestPortfolioService:
    def test_add_and_list(self, store, user):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 20000)
        assert holding.id
        assert holding.coin_id == "bitcoin"
        listed = svc.list_holdings(user.id)
        assert [h.id for h in listed] == [holding.id]
        assert listed[0].amount == 2

    @pytest.mark.parametrize(
        "amount,price",
        [
            (0, 100),
            (-1, 100),
            (1, 0),
            (1, -5),
            (float("inf"), 100),
            (float("nan"), 100),
            (1, float("inf")),
            (1, float("nan")),
        ],
    )
    def test_add_rejects_non_positive_or_non_finite(self, store, user, amount, price):
        svc = PortfolioService(store)
        with pytest.raises(InvalidInputError):
            svc.add_holding(user.id, make_quote(), amount, price)
        assert svc.list_holdings(user.id) == []

    def test_validation_error_names_field(self, store, user):
        with pytest.raises(InvalidInputError) as exc:
            PortfolioService(store).add_holding(user.id, make_quote(), -1, 100)
        assert "amount" in exc.value.fields

    def test_set_amount_updates(self, store, user):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 20000)
        updated = svc.set_amount(holding.id, 5)
        assert updated.amount == 5
        assert svc.get_holding(holding.id).amount == 5

    @pytest.mark.parametrize("amount", [0, -3])
    def test_set_amount_non_positive_deletes(self, store, user, amount):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 20000)
        assert svc.set_amount(holding.id, amount) is None
        assert svc.list_holdings(user.id) == []

    def test_set_amount_missing(self, store):
        with pytest.raises(NotFoundError):
            PortfolioService(store).set_amount("missing", 1)

    def test_set_amount_nan(self, store, user):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 20000)
        with pytest.raises(InvalidInputError):
            svc.set_amount(holding.id, float("nan"))

    @pytest.mark.parametrize("price", [-5, float("nan"), float("inf")])
    def test_bad_ledger_price_rejected_before_write(self, store, user, price):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 100)
        with pytest.raises(InvalidInputError) as exc:
            svc.set_amount(holding.id, 3, price=price)
        assert "price" in exc.value.fields
        with pytest.raises(InvalidInputError):
            svc.remove_holding(holding.id, price=price)
        assert svc.get_holding(holding.id).amount == 2
        assert [t.type for t in svc.list_transactions(user.id)] == [TransactionType.BUY]

    def test_remove(self, store, user):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 20000)
        assert svc.remove_holding(holding.id) is True
        assert svc.remove_holding(holding.id) is False

    def test_transaction_ledger(self, store, user):
        svc = PortfolioService(store)
        holding = svc.add_holding(user.id, make_quote(), 2, 100)
        svc.set_amount(holding.id, 3)
        svc.set_amount(holding.id, 1, price=150)
        svc.set_amount(holding.id, 0)
        txs = svc.list_transactions(user.id)
        assert [(t.type, t.amount) for t in txs] == [
            (TransactionType.BUY, 2),
            (TransactionType.BUY, 1),
            (TransactionType.SELL, 2),
            (TransactionType.SELL, 1),
        ]
        assert txs[0].total_value == 200
        assert txs[2].price == 150

    def test_holdings_scoped_to_user(self, store, user):
        svc = PortfolioService(store)
        other = AuthService(store).login("other@example.com")
        svc.add_holding(user.id, make_quote(), 1, 1)
        assert svc.list_holdings(other.id) == []


class TestWatchlistService:
    def test_toggle_round_trip(self, store, user):
        svc = WatchlistService(store)
        btc = make_quote()
        assert svc.toggle(user.id, btc) is True
        assert svc.coin_ids(user.id) == {"bitcoin"}
        assert svc.toggle(user.id, btc) is False
        assert svc.coin_ids(user.id) == frozenset()

    def test_entries_unique(self, store, user):
        svc = WatchlistService(store)
        svc.toggle(user.id, make_quote("bitcoin"))
        svc.toggle(user.id, make_quote("ethereum"))
        assert sorted(i.coin_id for i in svc.list(user.id)) == ["bitcoin", "ethereum"]

    def test_remove(self, store, user):
        svc = WatchlistService(store)
        svc.toggle(user.id, make_quote())
        item = svc.list(user.id)[0]
        assert svc.remove(item.id) is True
        assert svc.list(user.id) == []


class TestAlertService:
    def test_create_is_active(self, store, user):
        rule = AlertService(store).create(user.id, make_quote(), 35000, "above")
        assert rule.is_active is True
        assert rule.condition == AlertCondition.ABOVE
        assert AlertService(store).list(user.id) == [rule]

    @pytest.mark.parametrize(
        "target,condition",
        [(0, "above"), (-1, "below"), (10, "sideways"), (float("inf"), "above"), (float("nan"), "below")],
    )
    def test_create_rejects_bad_input(self, store, user, target, condition):
        with pytest.raises(InvalidInputError):
            AlertService(store).create(user.id, make_quote(), target, condition)

    def test_toggle_persists(self, store, user):
        svc = AlertService(store)
        rule = svc.create(user.id, make_quote(), 100, "below")
        assert svc.toggle(rule.id).is_active is False
        assert svc.get(rule.id).is_active is False
        assert svc.toggle(rule.id).is_active is True

    def test_toggle_missing(self, store):
        with pytest.raises(NotFoundError):
            AlertService(store).toggle("missing")

    def test_update(self, store, user):
        svc = AlertService(store)
        rule = svc.create(user.id, make_quote(), 100, "below")
        updated = svc.update(rule.id, target_price=200, condition="above")
        assert updated.target_price == 200
        assert updated.condition == AlertCondition.ABOVE
        with pytest.raises(InvalidInputError):
            svc.update(rule.id, target_price=-5)

    def test_delete(self, store, user):
        svc = AlertService(store)
        rule = svc.create(user.id, make_quote(), 100, "below")
        assert svc.delete(rule.id) is True
        assert svc.list(user.id) == []
