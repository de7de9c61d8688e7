"""Tests for LedgerService."""

import threading
from unittest.mock import MagicMock, patch

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.db import connection

from stampcard.adapters.orm import OrmAccountStore
from stampcard.credentials import verify_passcode
from stampcard.exceptions import StampcardError, StoreUnavailable
from stampcard.protocols import AccountInfo
from stampcard.services.ledger import LedgerService
from stampcard.signals import credential_reset, reward_redeemed, stamp_added


def _snapshot(stamps):
    return AccountInfo(id=1, username="maria", credential_hash="x", stamps=stamps)


class TestProgress:
    """Pure computation, no store involved."""

    @pytest.mark.parametrize(
        "stamps, to_next, unlocked",
        [
            (0, 6, False),
            (4, 2, False),
            (5, 1, False),
            (6, 0, True),
            (9, 0, True),
        ],
    )
    def test_progress(self, memory_store, stamps, to_next, unlocked):
        progress = LedgerService(memory_store).progress(_snapshot(stamps))
        assert progress.stamps_to_next == to_next
        assert progress.unlocked is unlocked
        assert progress.target == 6

    def test_follows_configured_threshold(self, memory_store, stampcard_config):
        stampcard_config(STAMPS_FOR_REWARD=10)
        progress = LedgerService(memory_store).progress(_snapshot(6))
        assert progress.stamps_to_next == 4
        assert progress.unlocked is False


class TestAddStamp:
    def test_increments(self, ledger, account):
        assert ledger.add_stamp(account.id).stamps == 1
        assert ledger.add_stamp(account.id).stamps == 2

    def test_no_upper_bound(self, ledger, account, with_stamps):
        with_stamps(12)
        assert ledger.add_stamp(account.id).stamps == 13

    def test_missing_account(self, ledger):
        with pytest.raises(StampcardError) as exc:
            ledger.add_stamp(999)
        assert exc.value.code == "ACCOUNT_NOT_FOUND"

    def test_by_username(self, ledger, account):
        assert ledger.add_stamp_for("MARIA").stamps == 1

    def test_emits_signal(self, ledger, account):
        receiver = MagicMock()
        stamp_added.connect(receiver)
        try:
            ledger.add_stamp(account.id)
        finally:
            stamp_added.disconnect(receiver)
        receiver.assert_called_once()
        assert receiver.call_args.kwargs["account"].stamps == 1


class TestRedeem:
    def test_redeem_with_exactly_six(self, ledger, account, with_stamps):
        with_stamps(6)
        result = ledger.redeem(account.id)
        assert (result.stamps, result.rewards) == (0, 1)

    def test_redeem_keeps_surplus(self, ledger, account, with_stamps):
        with_stamps(9)
        result = ledger.redeem(account.id)
        assert (result.stamps, result.rewards) == (3, 1)

    def test_insufficient_leaves_counters(self, ledger, store, account, with_stamps):
        with_stamps(5)
        with pytest.raises(StampcardError) as exc:
            ledger.redeem(account.id)
        assert exc.value.code == "INSUFFICIENT_STAMPS"
        assert exc.value.data == {"available": 5, "required": 6}
        after = store.get_by_id(account.id)
        assert (after.stamps, after.rewards) == (5, 0)

    def test_missing_account(self, ledger):
        with pytest.raises(StampcardError) as exc:
            ledger.redeem(999)
        assert exc.value.code == "ACCOUNT_NOT_FOUND"

    def test_by_username(self, ledger, account, with_stamps):
        with_stamps(6)
        assert ledger.redeem_for("maria").rewards == 1

    def test_lost_race_reports_insufficient_stamps(self, ledger, store, account, with_stamps):
        """The loser read 6 stamps, but the winner already consumed them."""
        with_stamps(6)
        stale = store.get_by_id(account.id)
        ledger.redeem(account.id)

        with patch.object(store, "get_by_id", return_value=stale):
            with pytest.raises(StampcardError) as exc:
                ledger.redeem(account.id)

        assert exc.value.code == "INSUFFICIENT_STAMPS"
        after = store.get_by_id(account.id)
        assert (after.stamps, after.rewards) == (0, 1)

    def test_emits_signal(self, ledger, account, with_stamps):
        with_stamps(6)
        receiver = MagicMock()
        reward_redeemed.connect(receiver)
        try:
            ledger.redeem(account.id)
        finally:
            reward_redeemed.disconnect(receiver)
        assert receiver.call_args.kwargs["account"].rewards == 1

    def test_configured_threshold(self, ledger, account, with_stamps, stampcard_config):
        stampcard_config(STAMPS_FOR_REWARD=3)
        with_stamps(3)
        assert ledger.redeem(account.id).stamps == 0


class TestResetCredential:
    def test_new_passcode_verifies(self, ledger, store, account):
        ledger.reset_credential(account.id, "9999")
        stored = store.get_by_id(account.id)
        assert verify_passcode("9999", stored.credential_hash)
        assert not verify_passcode("4821", stored.credential_hash)

    def test_weak_passcode_keeps_old_credential(self, ledger, store, account):
        with pytest.raises(StampcardError) as exc:
            ledger.reset_credential(account.id, "123")
        assert exc.value.code == "WEAK_PASSCODE"
        assert verify_passcode("4821", store.get_by_id(account.id).credential_hash)

    def test_missing_account(self, ledger):
        with pytest.raises(StampcardError) as exc:
            ledger.reset_credential(999, "9999")
        assert exc.value.code == "ACCOUNT_NOT_FOUND"

    def test_by_username(self, ledger, store, account):
        ledger.reset_credential_for("Maria", "9999")
        assert verify_passcode("9999", store.get_by_id(account.id).credential_hash)

    def test_by_username_checks_strength_first(self, ledger):
        with pytest.raises(StampcardError) as exc:
            ledger.reset_credential_for("ghost", "1")
        assert exc.value.code == "WEAK_PASSCODE"

    def test_emits_signal(self, ledger, account):
        receiver = MagicMock()
        credential_reset.connect(receiver)
        try:
            ledger.reset_credential(account.id, "9999")
        finally:
            credential_reset.disconnect(receiver)
        receiver.assert_called_once()


class TestConfiguration:
    @pytest.mark.parametrize("value", [0, -6])
    def test_non_positive_stamps_for_reward_rejected(self, memory_store, stampcard_config, value):
        stampcard_config(STAMPS_FOR_REWARD=value)
        ledger = LedgerService(memory_store)
        account = memory_store.create("maria", "hash")

        with pytest.raises(ImproperlyConfigured):
            ledger.redeem(account.id)
        assert memory_store.get_by_id(account.id).rewards == 0

    def test_custom_stamps_for_reward(self, memory_store, stampcard_config):
        stampcard_config(STAMPS_FOR_REWARD=2)
        ledger = LedgerService(memory_store)
        account = memory_store.create("maria", "hash")
        memory_store.apply_counter_delta(account.id, 2, 0)

        redeemed = ledger.redeem(account.id)
        assert (redeemed.stamps, redeemed.rewards) == (0, 1)


class TestInvariants:
    def test_counters_never_negative(self, ledger, store, account):
        for step in ["redeem", "add", "redeem"] + ["add"] * 7 + ["redeem"] * 3:
            try:
                if step == "add":
                    ledger.add_stamp(account.id)
                else:
                    ledger.redeem(account.id)
            except StampcardError as exc:
                assert exc.code == "INSUFFICIENT_STAMPS"
            current = store.get_by_id(account.id)
            assert current.stamps >= 0
            assert current.rewards >= 0
        final = store.get_by_id(account.id)
        assert (final.stamps, final.rewards) == (2, 1)


class TestConcurrency:
    """Threaded races against the in-process store."""

    @staticmethod
    def _race(count, target):
        barrier = threading.Barrier(count)
        outcomes = []
        lock = threading.Lock()

        def run():
            barrier.wait()
            try:
                target()
                result = "ok"
            except StampcardError as exc:
                result = exc.code
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=run) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return outcomes

    def test_two_redemptions_on_six_stamps(self, memory_store):
        ledger = LedgerService(memory_store)
        account = memory_store.create("maria", "hash")
        memory_store.apply_counter_delta(account.id, 6, 0)

        outcomes = self._race(2, lambda: ledger.redeem(account.id))

        assert sorted(outcomes) == ["INSUFFICIENT_STAMPS", "ok"]
        final = memory_store.get_by_id(account.id)
        assert (final.stamps, final.rewards) == (0, 1)

    def test_many_redemptions_never_overdraw(self, memory_store):
        ledger = LedgerService(memory_store)
        account = memory_store.create("maria", "hash")
        memory_store.apply_counter_delta(account.id, 20, 0)

        outcomes = self._race(10, lambda: ledger.redeem(account.id))

        assert outcomes.count("ok") == 3
        final = memory_store.get_by_id(account.id)
        assert (final.stamps, final.rewards) == (2, 3)

    def test_concurrent_stamps_are_not_lost(self, memory_store):
        ledger = LedgerService(memory_store)
        account = memory_store.create("maria", "hash")

        outcomes = self._race(50, lambda: ledger.add_stamp(account.id))

        assert outcomes == ["ok"] * 50
        assert memory_store.get_by_id(account.id).stamps == 50

    def test_concurrent_creates_of_one_username(self, memory_store):
        outcomes = self._race(8, lambda: memory_store.create("Bob", "hash"))

        assert outcomes.count("ok") == 1
        assert outcomes.count("DUPLICATE_USERNAME") == 7
        assert len(memory_store.list_accounts()) == 1


class TestOrmConcurrency:
    """
    Threaded races against the ORM store, each thread on its own connection.

    SQLite serializes writers and may refuse a contended lock outright; such
    attempts surface as StoreUnavailable. Whatever the interleaving, the
    counters must match the successful operations.
    """

    @staticmethod
    def _race(count, target):
        barrier = threading.Barrier(count)
        outcomes = []
        lock = threading.Lock()

        def run():
            try:
                barrier.wait()
                try:
                    target()
                    result = "ok"
                except StampcardError as exc:
                    result = exc.code
                except StoreUnavailable:
                    result = "unavailable"
                with lock:
                    outcomes.append(result)
            finally:
                connection.close()

        threads = [threading.Thread(target=run) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return outcomes

    @pytest.fixture
    def orm(self, transactional_db):
        return OrmAccountStore()

    def test_redemptions_never_overdraw(self, orm):
        ledger = LedgerService(orm)
        account = orm.create("maria", "hash")
        orm.apply_counter_delta(account.id, 12, 0)

        outcomes = self._race(6, lambda: ledger.redeem(account.id))

        assert set(outcomes) <= {"ok", "INSUFFICIENT_STAMPS", "unavailable"}
        redeemed = outcomes.count("ok")
        assert redeemed <= 2
        final = orm.get_by_id(account.id)
        assert (final.stamps, final.rewards) == (12 - 6 * redeemed, redeemed)

    def test_stamps_are_not_lost(self, orm):
        ledger = LedgerService(orm)
        account = orm.create("maria", "hash")

        outcomes = self._race(10, lambda: ledger.add_stamp(account.id))

        assert set(outcomes) <= {"ok", "unavailable"}
        assert orm.get_by_id(account.id).stamps == outcomes.count("ok")

    def test_creates_of_one_username(self, orm):
        outcomes = self._race(6, lambda: orm.create("Bob", "hash"))

        assert set(outcomes) <= {"ok", "DUPLICATE_USERNAME", "unavailable"}
        assert outcomes.count("ok") <= 1
        assert len(orm.list_accounts()) == outcomes.count("ok")
