import pytest
from sqlalchemy import select

from accrual.core.constants import MAX_AMOUNT
from accrual.core.errors import InsufficientPrincipal, SupplyCapExceeded, Unauthorized
from accrual.models.audit_log import AuditLog
from accrual.services.ledger import accrued_balance

from conftest import OWNER, T0, VAULT

E18 = 10**18
RATE = 5 * 10**10


def test_untouched_account_reads_as_empty(lg):
    assert lg.balance_of("nobody") == 0
    assert lg.principal_balance_of("nobody") == 0
    assert lg.get_account_rate("nobody") == 0
    assert lg.last_settled_at("nobody") == 0


def test_mint_freezes_rate_and_starts_clock(lg):
    principal = lg.mint(VAULT, "alice", 1000 * E18, RATE)

    assert principal == 1000 * E18
    assert lg.principal_balance_of("alice") == 1000 * E18
    assert lg.balance_of("alice") == 1000 * E18
    assert lg.get_account_rate("alice") == RATE
    assert lg.last_settled_at("alice") == T0


def test_mint_without_rate_uses_global_rate(lg):
    lg.set_global_rate(OWNER, 3 * 10**10)
    lg.mint(VAULT, "alice", 10 * E18)
    assert lg.get_account_rate("alice") == 3 * 10**10


def test_reads_do_not_realize_interest(lg, clock):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(3600)

    assert lg.balance_of("alice") == 1000 * E18 + 180 * 10**15
    assert lg.principal_balance_of("alice") == 1000 * E18
    assert lg.last_settled_at("alice") == T0


def test_settle_is_idempotent_at_the_same_instant(lg, clock):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(3600)

    realized = lg.settle("alice")
    assert realized == 180 * 10**15
    assert lg.principal_balance_of("alice") == 1000 * E18 + 180 * 10**15
    assert lg.last_settled_at("alice") == T0 + 3600

    assert lg.settle("alice") == 0
    assert lg.principal_balance_of("alice") == 1000 * E18 + 180 * 10**15
    assert lg.balance_of("alice") == lg.principal_balance_of("alice")


def test_settle_creates_untouched_account(lg, clock):
    assert lg.settle("fresh") == 0
    assert lg.last_settled_at("fresh") == T0
    assert lg.principal_balance_of("fresh") == 0


def test_zero_principal_stays_zero_whatever_the_rate(lg, clock):
    lg.mint(VAULT, "bob", 0, 10**15)
    clock.warp(10**7)
    assert lg.get_account_rate("bob") == 10**15
    assert lg.balance_of("bob") == 0

    lg.mint(VAULT, "carol", 50 * E18, RATE)
    clock.warp(100)
    lg.burn(VAULT, "carol", MAX_AMOUNT)
    clock.warp(10**6)
    assert lg.principal_balance_of("carol") == 0
    assert lg.balance_of("carol") == 0


def test_second_mint_settles_under_previous_rate(lg, clock):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(3600)

    lg.mint(VAULT, "alice", 0, 10**10)
    settled = 1000 * E18 + 180 * 10**15
    assert lg.principal_balance_of("alice") == settled
    assert lg.get_account_rate("alice") == 10**10

    clock.warp(3600)
    assert lg.balance_of("alice") == accrued_balance(settled, 10**10, T0 + 3600, T0 + 7200)


def test_burn_settles_before_removing(lg, clock):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(3600)

    burned = lg.burn(VAULT, "alice", 100 * E18)
    assert burned == 100 * E18
    assert lg.principal_balance_of("alice") == 900 * E18 + 180 * 10**15
    assert lg.last_settled_at("alice") == T0 + 3600


def test_burn_max_empties_live_balance(lg, clock):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(7200)
    live = lg.balance_of("alice")

    assert lg.burn(VAULT, "alice", MAX_AMOUNT) == live
    assert lg.balance_of("alice") == 0
    assert lg.principal_balance_of("alice") == 0


def test_burn_more_than_live_balance_changes_nothing(lg, clock):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(3600)
    live = lg.balance_of("alice")

    with pytest.raises(InsufficientPrincipal) as e:
        lg.burn(VAULT, "alice", live + 1)

    assert e.value.requested == live + 1
    assert e.value.available == live
    assert lg.principal_balance_of("alice") == 1000 * E18
    assert lg.last_settled_at("alice") == T0


def test_mint_and_burn_require_mutator_role(lg):
    with pytest.raises(Unauthorized) as e:
        lg.mint("mallory", "mallory", 10 * E18, RATE)
    assert e.value.action == "mint"
    assert lg.principal_balance_of("mallory") == 0

    lg.mint(VAULT, "alice", 10 * E18, RATE)
    with pytest.raises(Unauthorized):
        lg.burn("mallory", "alice", 1)
    assert lg.principal_balance_of("alice") == 10 * E18


def test_role_is_independent_of_ownership(lg):
    # the owner is not a mutator unless granted
    with pytest.raises(Unauthorized):
        lg.mint(OWNER, "alice", 1, RATE)

    assert lg.grant_role(OWNER, "bridge") is True
    assert lg.grant_role(OWNER, "bridge") is False
    lg.mint("bridge", "alice", 1, RATE)

    assert lg.revoke_role(OWNER, "bridge") is True
    with pytest.raises(Unauthorized):
        lg.mint("bridge", "alice", 1, RATE)


def test_only_owner_grants_roles(lg):
    with pytest.raises(Unauthorized):
        lg.grant_role(VAULT, "mallory")
    assert lg.has_role("mallory") is False
    assert [r.account for r in lg.role_holders()] == [VAULT]


def test_mutations_are_audited(lg, session):
    lg.mint(VAULT, "alice", 5 * E18, RATE)
    lg.burn(VAULT, "alice", 2 * E18)

    rows = session.execute(select(AuditLog).where(AuditLog.entity_id == "alice").order_by(AuditLog.id)).scalars().all()
    assert [r.action for r in rows] == ["ledger.mint", "ledger.burn"]
    assert rows[0].details == {"amount": str(5 * E18), "rate": str(RATE)}
    assert rows[1].actor == VAULT


def test_rejected_operation_leaves_no_audit_row(lg, session):
    with pytest.raises(InsufficientPrincipal):
        lg.burn(VAULT, "alice", 1)
    rows = session.execute(select(AuditLog).where(AuditLog.action == "ledger.burn")).scalars().all()
    assert rows == []


def test_negative_amount_is_rejected(lg):
    with pytest.raises(ValueError):
        lg.mint(VAULT, "alice", -1, RATE)


def test_failure_after_settlement_discards_it(lg, clock, session):
    lg.mint(VAULT, "alice", 1000 * E18, RATE)
    clock.warp(3600)

    # the negative rate is only rejected after alice has been settled
    with pytest.raises(ValueError):
        lg.mint(VAULT, "alice", 1, -1)

    assert lg.principal_balance_of("alice") == 1000 * E18
    assert lg.last_settled_at("alice") == T0
    assert lg.get_account_rate("alice") == RATE
    assert lg.balance_of("alice") == 1000 * E18 + 180 * 10**15
    rows = session.execute(select(AuditLog).where(AuditLog.entity_id == "alice")).scalars().all()
    assert [r.action for r in rows] == ["ledger.mint"]


def test_accrual_saturates_at_max_amount(lg, clock):
    lg.mint(VAULT, "whale", MAX_AMOUNT, RATE)
    clock.warp(3600)

    assert lg.balance_of("whale") == MAX_AMOUNT
    lg.settle("whale")
    assert lg.principal_balance_of("whale") == MAX_AMOUNT
    assert lg.total_supply() == MAX_AMOUNT


def test_mint_cannot_push_supply_past_max_amount(lg, clock):
    lg.mint(VAULT, "alice", MAX_AMOUNT - 10, RATE)

    with pytest.raises(SupplyCapExceeded) as e:
        lg.mint(VAULT, "bob", 11, RATE)
    assert e.value.supply == MAX_AMOUNT - 10
    assert lg.principal_balance_of("bob") == 0
    assert lg.get_account_rate("bob") == 0

    lg.mint(VAULT, "bob", 10, RATE)
    assert lg.total_supply() == MAX_AMOUNT


def test_mint_counts_interest_realized_by_its_own_settlement(lg, clock):
    lg.mint(VAULT, "alice", MAX_AMOUNT // 2, RATE)
    clock.warp(3600)
    live = lg.balance_of("alice")

    with pytest.raises(SupplyCapExceeded):
        lg.mint(VAULT, "alice", MAX_AMOUNT - live + 1, RATE)
    assert lg.principal_balance_of("alice") == MAX_AMOUNT // 2

    lg.mint(VAULT, "alice", MAX_AMOUNT - live, RATE)
    assert lg.principal_balance_of("alice") == MAX_AMOUNT
