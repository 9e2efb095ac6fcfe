"""Tests for the optimistic mutation primitive."""

from ordering.checkout.optimistic import OptimisticMutation
from ordering.collaborators.port import CollaboratorError


class Counter:
    def __init__(self):
        self.value = 1
        self.mutations = OptimisticMutation(lambda: self.value)

    def restore(self, snapshot):
        self.value = snapshot

    def set(self, value):
        self.value = value


def _fail():
    raise CollaboratorError("boom")


class TestOptimisticMutation:
    def test_success_keeps_local_value(self):
        counter = Counter()

        result = counter.mutations.run("k", apply=lambda: counter.set(2), confirm=lambda: None, recover=counter.restore)

        assert result.succeeded is True
        assert counter.value == 2
        assert counter.mutations.in_flight("k") is False

    def test_failure_recovers_snapshot(self):
        counter = Counter()

        result = counter.mutations.run("k", apply=lambda: counter.set(2), confirm=_fail, recover=counter.restore)

        assert result.succeeded is False
        assert result.error == "boom"
        assert counter.value == 1

    def test_reconcile_receives_confirmed_value(self):
        counter = Counter()

        counter.mutations.run(
            "k",
            apply=lambda: counter.set(2),
            confirm=lambda: 5,
            recover=counter.restore,
            reconcile=counter.set,
        )

        assert counter.value == 5

    def test_superseded_failure_does_not_roll_back_newer_value(self):
        counter = Counter()

        def confirm_after_newer_edit():
            # A newer mutation on the same key starts and succeeds first
            counter.mutations.run("k", apply=lambda: counter.set(3), confirm=lambda: None, recover=counter.restore)
            raise CollaboratorError("stale")

        result = counter.mutations.run(
            "k", apply=lambda: counter.set(2), confirm=confirm_after_newer_edit, recover=counter.restore
        )

        assert result.succeeded is False
        assert result.superseded is True
        assert counter.value == 3

    def test_keys_are_independent(self):
        counter = Counter()
        other = Counter()

        def confirm_with_other_key():
            counter.mutations.run("other", apply=lambda: other.set(9), confirm=lambda: None, recover=other.restore)
            raise CollaboratorError("boom")

        result = counter.mutations.run(
            "k", apply=lambda: counter.set(2), confirm=confirm_with_other_key, recover=counter.restore
        )

        assert result.superseded is False
        assert counter.value == 1
        assert other.value == 9
