import pytest

from activity.services import ActivityLogService


@pytest.mark.unit
class TestActivityLogService:
    @pytest.fixture(autouse=True)
    def setup(self, context, clock):
        self.clock = clock
        self.service = ActivityLogService(context)

    def test_record(self):
        entry = self.service.record(
            "listing-created",
            "New listing created: Soup",
            item={"id": "l1", "name": "Soup", "price": "3.00"},
            business_ids=["b1", "b1"],
            actor_id="b1",
        )

        assert entry["type"] == "listing-created"
        assert entry["timestamp"] == self.clock().isoformat()
        assert entry["item"] == {"id": "l1", "name": "Soup"}
        assert entry["business_ids"] == ["b1"]
        assert self.service.recent() == [entry]

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            self.service.record("listing-archived", "nope", item={})

    def test_recent_newest_first(self):
        first = self.service.record("listing-created", "first", item={"id": "l1"}, business_ids=["b1"])
        self.clock.advance(minutes=1)
        second = self.service.record("listing-deleted", "second", item={"id": "l1"}, business_ids=["b1"])
        third = self.service.record("order-placed", "third", item={"id": "o1"}, business_ids=["b2"])

        assert [e["id"] for e in self.service.recent()] == [third["id"], second["id"], first["id"]]
        assert [e["id"] for e in self.service.recent(limit=1)] == [third["id"]]
        assert [e["id"] for e in self.service.recent(business_id="b1")] == [second["id"], first["id"]]
