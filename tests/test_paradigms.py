"""Tests for the fundamentals, patterns and concurrency demos."""

import time
from concurrent.futures import Future

import pytest

from demos.concurrency import (READING_STAGES, Account, Agent, SharedValue, concurrent_increments,
                               first_completed, guarded_balance, run_pipeline, then, transfer,
                               worker_pool)
from demos.fundamentals import (AccountFrozen, BankAccount, Car, CreditCardProcessor,
                                CryptoProcessor, Motorcycle, PayPalProcessor, process_all)
from demos.patterns import (SORT_STRATEGIES, EmailBuilder, PDFDocument, Sorter, StockAlert,
                            StockDisplay, StockMarket, create_document)


class TestFundamentals:

    def test_bank_account_rules(self):
        account = BankAccount("1", "John", 100.0)

        assert account.deposit(50.0) == 150.0
        assert account.withdraw(20.0) == 130.0
        with pytest.raises(ValueError):
            account.withdraw(1000.0)
        with pytest.raises(ValueError):
            account.deposit(0)

        account.freeze()
        with pytest.raises(AccountFrozen):
            account.deposit(10.0)
        assert account.balance == 130.0
        assert "(FROZEN)" in str(account)

    def test_vehicles_extend_base_description(self):
        car = Car("Toyota", "Corolla", 2022, doors=2)
        bike = Motorcycle("Ducati", "Monster", 2021, has_sidecar=True)

        assert car.describe() == "2022 Toyota Corolla with 2 doors"
        assert bike.describe() == "2021 Ducati Monster with sidecar"
        assert bike.wheelie() == "Start the engine first"
        bike.start()
        assert bike.wheelie() == "Doing a wheelie!"

    def test_processors_share_interface(self):
        lines = process_all([CreditCardProcessor(), PayPalProcessor(), CryptoProcessor()], 100.0)

        assert lines == [
            "Processed 100.00 via credit card (fee 3.20)",
            "Processed 100.00 via PayPal (fee 3.75)",
            "Processed 100.00 via crypto (fee 1.00)",
        ]


class TestPatterns:

    @pytest.mark.parametrize("strategy", sorted(SORT_STRATEGIES))
    def test_every_strategy_sorts(self, strategy):
        values = [5, 3, 9, 1, 7, 2, 8, 4, 6, 3]

        assert Sorter(strategy).sort(values) == sorted(values)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            Sorter("bogo")

    def test_document_factory(self):
        assert isinstance(create_document("PDF"), PDFDocument)
        assert create_document("word").save() == "Saving Word doc"
        with pytest.raises(ValueError):
            create_document("video")

    def test_observers_are_notified(self):
        market, display, alert = StockMarket(), StockDisplay(), StockAlert({"AAPL": 180.0})
        market.subscribe(display)
        market.subscribe(alert)

        market.set_price("AAPL", 175.0)
        market.set_price("AAPL", 181.0)
        market.set_price("AAPL", 182.0)
        market.unsubscribe(display)
        market.set_price("AAPL", 170.0)

        assert display.lines == ["AAPL: - -> 175.00", "AAPL: 175.0 -> 181.00", "AAPL: 181.0 -> 182.00"]
        assert alert.alerts == ["ALERT: AAPL above 180.00 at 181.00"]

    def test_email_builder(self):
        email = EmailBuilder().sender("a@x.com").to("b@x.com", "c@x.com").subject("Hi").build()

        assert email.to == ("b@x.com", "c@x.com")
        assert "Subject: Hi" in str(email)
        with pytest.raises(ValueError):
            EmailBuilder().to("b@x.com").build()
        with pytest.raises(ValueError):
            EmailBuilder().sender("a@x.com").build()


class TestConcurrency:

    def test_counter_updates_are_atomic(self):
        assert concurrent_increments(threads=8, increments=500) == 4000
        assert SharedValue(1).update(lambda v: v * 10) == 10

    def test_transfers_preserve_total(self):
        alice, bob = Account("alice", 100.0), Account("bob", 50.0)

        assert transfer(alice, bob, 30.0)
        assert not transfer(bob, alice, 500.0)
        assert (alice.balance, bob.balance) == (70.0, 80.0)

    def test_worker_pool_handles_every_job(self):
        results = worker_pool(range(20), lambda n: n * 2, workers=3)

        assert sorted(results) == [n * 2 for n in range(20)]

    def test_validator_rejects_and_watches_see_accepted_changes(self):
        final, changes = guarded_balance([50, -30, -200, -120])

        assert final == 0
        assert [c["change"] for c in changes] == [50, -30, -120]

    def test_compare_and_set(self):
        value = SharedValue(2)

        assert value.compare_and_set(2, 12)
        assert not value.compare_and_set(2, 0)
        assert value.value == 12
        with pytest.raises(ValueError):
            SharedValue(-1, validator=lambda v: v >= 0)

    def test_agent_runs_actions_in_order(self):
        with Agent([]) as agent:
            for n in range(20):
                agent.send(lambda seen, n: seen + [n], n)
            agent.await_actions(timeout=5)

            assert agent.value == list(range(20))

    def test_agent_error_handler_replaces_value(self):
        errors = []

        def reset(agent, error):
            errors.append(str(error))
            return 0

        with Agent(0, error_handler=reset) as agent:
            agent.send(lambda n: n + 3)
            agent.send(lambda n: n / 0)
            agent.send(lambda n: n + 5)
            agent.await_actions(timeout=5)

            assert agent.value == 5
            assert errors == ["division by zero"]

    def test_agent_without_handler_keeps_value(self):
        with Agent(7) as agent:
            agent.send(lambda n: n / 0)
            agent.await_actions(timeout=5)

            assert agent.value == 7
            assert isinstance(agent.error, ZeroDivisionError)

    def test_first_completed_picks_fastest(self):
        name, result = first_completed(
            {"slow": lambda: time.sleep(0.5) or "slow", "fast": lambda: "fast"}, timeout=2,
        )

        assert (name, result) == ("fast", "fast")

    def test_first_completed_times_out(self):
        assert first_completed({"slow": lambda: time.sleep(0.3)}, timeout=0.01) == (None, None)

    def test_pipeline_filters_and_keeps_order(self):
        readings = [{"id": 1, "value": 5}, {"id": 2, "value": "invalid"}, {"id": 3, "value": 10}]

        results = run_pipeline(readings, READING_STAGES)

        assert [(r["id"], r["value"], r["status"]) for r in results] == [
            (1, 25, "COMPLETED"), (3, 100, "COMPLETED"),
        ]

    def test_chained_futures(self):
        source = Future()
        result = then(then(source, lambda v: v + 1), lambda v: v * 2)
        failing = then(source, lambda v: v / 0)

        source.set_result(5)

        assert result.result(timeout=1) == 12
        with pytest.raises(ZeroDivisionError):
            failing.result(timeout=1)
