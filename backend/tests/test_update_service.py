"""
CityGuide Backend — Place Update Workflow Tests
=================================================

What:  Building the stored diff, owner-only proposals, and approval applying
       (or, for a deleted place, not applying) the change.
"""

import uuid

import pytest

from cityguide.exceptions import InvalidTransitionError, NotFoundError, NotOwnerError
from cityguide.models.place import Place
from cityguide.models.submission import STATUS_APPROVED, STATUS_PENDING, STATUS_REJECTED
from cityguide.services.place_service import PlaceService
from cityguide.services.update_service import UpdateService, apply_update_diff, build_update_diff


def existing_place() -> Place:
    return Place(
        id=uuid.uuid4(),
        name="Cubbon Park",
        category="park",
        city="Bangalore",
        description="Green lung of the city",
        image="https://example.com/cubbon.jpg",
        address="Kasturba Road",
        contact_number="080 0000",
        website="https://cubbon.example.com",
        reviews=[],
    )


class TestBuildUpdateDiff:
    def test_diff_is_self_contained(self):
        place = existing_place()
        diff = build_update_diff(place, {"name": "Cubbon Park (Sri Chamarajendra Park)"})

        assert diff == {
            "name": "Cubbon Park (Sri Chamarajendra Park)",
            "category": "park",
            "description": "Green lung of the city",
            "image": "https://example.com/cubbon.jpg",
            "address": "Kasturba Road",
            "contactNumber": "080 0000",
            "website": "https://cubbon.example.com",
        }

    def test_blank_required_fields_keep_current_value(self):
        place = existing_place()
        diff = build_update_diff(place, {"name": "  ", "image": "", "description": ""})
        assert diff["name"] == "Cubbon Park"
        assert diff["image"] == "https://example.com/cubbon.jpg"
        assert diff["description"] == "Green lung of the city"

    def test_blank_optional_fields_are_cleared(self):
        place = existing_place()
        diff = build_update_diff(place, {"website": "", "contactNumber": " "})
        assert diff["website"] is None
        assert diff["contactNumber"] is None

    def test_category_is_lower_cased(self):
        diff = build_update_diff(existing_place(), {"category": " Museum "})
        assert diff["category"] == "museum"

    def test_apply_ignores_unknown_keys(self):
        place = existing_place()
        changed = apply_update_diff(place, {"name": "New", "city": "Mysore", "ownerId": "x"})
        assert changed == ["name"]
        assert place.name == "New"
        assert place.city == "Bangalore"

    def test_apply_keeps_required_fields_on_blank_values(self):
        place = existing_place()
        changed = apply_update_diff(place, {"name": "", "description": None, "website": None})
        assert changed == ["website"]
        assert place.name == "Cubbon Park"
        assert place.description == "Green lung of the city"
        assert place.website is None


class TestUpdateWorkflow:
    def setup_method(self):
        self.service = UpdateService()

    async def _owned_place(self, db_session, make_user, make_place):
        owner = await make_user(db_session, name="Owner")
        admin = await make_user(db_session, name="Admin", role="admin")
        place = await make_place(db_session, owner_id=owner.id, name="Old Name")
        return owner, admin, place

    @pytest.mark.asyncio
    async def test_proposal_does_not_touch_place(self, db_session, make_user, make_place):
        owner, _, place = await self._owned_place(db_session, make_user, make_place)

        update = await self.service.propose_update(
            db_session, place.id, {"name": "New Name"}, owner
        )

        assert update.status == STATUS_PENDING
        assert update.place_name == "Old Name"
        assert update.updates["name"] == "New Name"
        assert update.applied is False
        assert place.name == "Old Name"

    @pytest.mark.asyncio
    async def test_only_owner_may_propose(self, db_session, make_user, make_place):
        _, admin, place = await self._owned_place(db_session, make_user, make_place)
        stranger = await make_user(db_session, name="Stranger")

        with pytest.raises(NotOwnerError, match="Only the place owner can request updates"):
            await self.service.propose_update(db_session, place.id, {"name": "X"}, stranger)
        # Admins are not owners either
        with pytest.raises(NotOwnerError):
            await self.service.propose_update(db_session, place.id, {"name": "X"}, admin)

    @pytest.mark.asyncio
    async def test_proposal_for_unknown_place(self, db_session, make_user):
        owner = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Place not found"):
            await self.service.propose_update(db_session, uuid.uuid4(), {"name": "X"}, owner)

    @pytest.mark.asyncio
    async def test_approval_applies_diff(self, db_session, make_user, make_place):
        owner, admin, place = await self._owned_place(db_session, make_user, make_place)
        update = await self.service.propose_update(
            db_session, place.id, {"name": "New Name", "category": "Restaurant", "website": ""}, owner
        )

        outcome = await self.service.review(db_session, update.id, STATUS_APPROVED, "ok", admin)

        assert outcome.changed is True
        assert outcome.applied is True
        assert update.status == STATUS_APPROVED
        assert update.applied is True
        assert place.name == "New Name"
        assert place.category == "restaurant"
        assert place.website is None

    @pytest.mark.asyncio
    async def test_rejection_leaves_place(self, db_session, make_user, make_place):
        owner, admin, place = await self._owned_place(db_session, make_user, make_place)
        update = await self.service.propose_update(db_session, place.id, {"name": "New"}, owner)

        outcome = await self.service.review(db_session, update.id, STATUS_REJECTED, None, admin)

        assert outcome.changed is True
        assert outcome.applied is False
        assert place.name == "Old Name"

        with pytest.raises(InvalidTransitionError):
            await self.service.review(db_session, update.id, STATUS_APPROVED, None, admin)

    @pytest.mark.asyncio
    async def test_approval_after_place_deleted(self, db_session, make_user, make_place):
        owner, admin, place = await self._owned_place(db_session, make_user, make_place)
        update = await self.service.propose_update(db_session, place.id, {"name": "New"}, owner)
        await PlaceService().delete_place(db_session, place.id, owner)

        outcome = await self.service.review(db_session, update.id, STATUS_APPROVED, None, admin)

        assert outcome.changed is True
        assert outcome.applied is False
        assert update.status == STATUS_APPROVED
        assert update.applied is False
        assert await db_session.get(Place, place.id) is None

    @pytest.mark.asyncio
    async def test_list_all_reports_missing_places(self, db_session, make_user, make_place):
        owner, _, place = await self._owned_place(db_session, make_user, make_place)
        await self.service.propose_update(db_session, place.id, {"name": "New"}, owner)

        updates, submitters, existing = await self.service.list_all(db_session)
        assert len(updates) == 1
        assert submitters[owner.id].name == "Owner"
        assert existing == {place.id}

        await PlaceService().delete_place(db_session, place.id, owner)
        _, _, existing = await self.service.list_all(db_session, STATUS_PENDING)
        assert existing == set()
