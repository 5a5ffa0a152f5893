"""
CityGuide Backend — Review Aggregator Tests
=============================================

What:  Rating statistics, the one-review-per-author rule, and owner replies.
How:   The pure rules run on transient Place objects; ReviewService runs
       against the in-memory SQLite database.
"""

import uuid

import pytest

from cityguide.exceptions import (
    DuplicateReviewError,
    EmptyReplyError,
    NotFoundError,
    NotOwnerError,
    ReviewNotFoundError,
    ValidationError,
)
from cityguide.models.place import Place
from cityguide.services.review_service import (
    ReviewService,
    append_review,
    compute_review_stats,
    set_owner_reply,
    validate_review_input,
)


def new_place(owner_id=None) -> Place:
    return Place(
        id=uuid.uuid4(),
        name="Lodhi Garden",
        category="park",
        city="Delhi",
        description="Tombs and lawns",
        owner_id=owner_id,
        total_reviews=0,
        average_rating=0.0,
        rating=0.0,
        reviews=[],
    )


class TestComputeReviewStats:
    def test_empty(self):
        assert compute_review_stats([]) == (0, 0.0)

    def test_mean_is_not_rounded(self):
        total, average = compute_review_stats([5, 4, 4])
        assert total == 3
        assert average == pytest.approx(13 / 3)


class TestAppendReview:
    def test_stats_follow_every_append(self):
        place = new_place()
        for rating in (5, 3, 4):
            append_review(place, uuid.uuid4(), "Reviewer", rating, "Nice")

        assert place.total_reviews == 3
        assert place.average_rating == 4.0
        assert place.rating == 4.0

        append_review(place, uuid.uuid4(), "Fourth", 2, "Meh")

        assert place.total_reviews == 4
        assert place.average_rating == 3.5
        assert place.rating == place.average_rating

    def test_review_fields(self):
        place = new_place()
        author = uuid.uuid4()
        review = append_review(place, author, "Priya", 5, "  Lovely evening walk  ")

        assert review.user_id == author
        assert review.user_name == "Priya"
        assert review.comment == "Lovely evening walk"
        assert review.owner_reply is None
        assert review.created_at is not None
        assert place.reviews == [review]

    def test_duplicate_author_leaves_place_untouched(self):
        place = new_place()
        author = uuid.uuid4()
        append_review(place, author, "Priya", 5, "First visit")

        with pytest.raises(DuplicateReviewError):
            append_review(place, author, "Priya", 1, "Changed my mind")

        assert place.total_reviews == 1
        assert place.average_rating == 5.0
        assert len(place.reviews) == 1

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, rating):
        place = new_place()
        with pytest.raises(ValidationError, match="between 1 and 5"):
            append_review(place, uuid.uuid4(), "Priya", rating, "Fine")
        assert place.reviews == []
        assert place.total_reviews == 0


class TestValidateReviewInput:
    @pytest.mark.parametrize("rating, comment", [(None, "text"), (4, None), (4, "   ")])
    def test_missing_fields(self, rating, comment):
        with pytest.raises(ValidationError, match="Rating and comment are required"):
            validate_review_input(rating, comment)

    @pytest.mark.parametrize("rating", [True, 4.5, "4"])
    def test_rating_must_be_int(self, rating):
        with pytest.raises(ValidationError, match="integer"):
            validate_review_input(rating, "text")

    def test_accepts_bounds(self):
        assert validate_review_input(1, "ok") == (1, "ok")
        assert validate_review_input(5, " ok ") == (5, "ok")


class TestOwnerReply:
    def setup_method(self):
        self.owner_id = uuid.uuid4()
        self.place = new_place(owner_id=self.owner_id)
        self.review = append_review(self.place, uuid.uuid4(), "Guest", 4, "Good")

    def test_owner_reply_is_stored(self):
        review = set_owner_reply(self.place, self.review.id, self.owner_id, " Thank you! ")
        assert review.owner_reply == "Thank you!"
        assert review.owner_reply_at is not None

    def test_reply_overwrites_previous(self):
        set_owner_reply(self.place, self.review.id, self.owner_id, "First")
        review = set_owner_reply(self.place, self.review.id, self.owner_id, "Second")
        assert review.owner_reply == "Second"

    def test_ownership_is_checked_before_review_lookup(self):
        with pytest.raises(NotOwnerError, match="Only the place owner can reply"):
            set_owner_reply(self.place, uuid.uuid4(), uuid.uuid4(), "")

    def test_review_lookup_before_reply_text(self):
        with pytest.raises(ReviewNotFoundError):
            set_owner_reply(self.place, uuid.uuid4(), self.owner_id, "")

    def test_empty_reply(self):
        with pytest.raises(EmptyReplyError):
            set_owner_reply(self.place, self.review.id, self.owner_id, "   ")
        assert self.review.owner_reply is None

    def test_stranger_reply_leaves_existing_reply(self):
        set_owner_reply(self.place, self.review.id, self.owner_id, "Thanks for coming")
        replied_at = self.review.owner_reply_at

        with pytest.raises(NotOwnerError):
            set_owner_reply(self.place, self.review.id, uuid.uuid4(), "Overwritten")

        assert self.review.owner_reply == "Thanks for coming"
        assert self.review.owner_reply_at == replied_at

    def test_unowned_place_has_no_owner(self):
        place = new_place(owner_id=None)
        review = append_review(place, uuid.uuid4(), "Guest", 3, "Okay")
        with pytest.raises(NotOwnerError):
            set_owner_reply(place, review.id, uuid.uuid4(), "Hi")


class TestReviewServicePersistence:
    def setup_method(self):
        self.service = ReviewService()

    @pytest.mark.asyncio
    async def test_add_reviews_persists_stats(self, db_session, make_user, make_place):
        place = await make_place(db_session)
        ratings = (5, 3, 4, 2)
        for i, rating in enumerate(ratings):
            author = await make_user(db_session, name=f"Reviewer {i}")
            await self.service.add_review(db_session, place.id, author, rating, "Visited")

        reloaded = await self.service.get_place_reviews(db_session, place.id)
        assert reloaded.total_reviews == 4
        assert reloaded.average_rating == 3.5
        assert [r.rating for r in reloaded.reviews] == list(ratings)

    @pytest.mark.asyncio
    async def test_second_review_by_same_user(self, db_session, make_user, make_place):
        place = await make_place(db_session)
        author = await make_user(db_session)
        await self.service.add_review(db_session, place.id, author, 4, "Good")

        with pytest.raises(DuplicateReviewError):
            await self.service.add_review(db_session, place.id, author, 5, "Better")

        assert place.total_reviews == 1

    @pytest.mark.asyncio
    async def test_unknown_place(self, db_session, make_user):
        author = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Place not found"):
            await self.service.add_review(db_session, uuid.uuid4(), author, 4, "Good")

    @pytest.mark.asyncio
    async def test_invalid_input_reported_before_lookup(self, db_session, make_user):
        author = await make_user(db_session)
        with pytest.raises(ValidationError):
            await self.service.add_review(db_session, uuid.uuid4(), author, 9, "Good")

    @pytest.mark.asyncio
    async def test_reply_by_owner(self, db_session, make_user, make_place):
        owner = await make_user(db_session, name="Owner")
        guest = await make_user(db_session, name="Guest")
        place = await make_place(db_session, owner_id=owner.id)
        await self.service.add_review(db_session, place.id, guest, 2, "Slow service")
        review_id = place.reviews[0].id

        updated = await self.service.reply_to_review(
            db_session, place.id, review_id, owner, "Sorry, we are hiring"
        )
        assert updated.reviews[0].owner_reply == "Sorry, we are hiring"
        replied_at = updated.reviews[0].owner_reply_at

        with pytest.raises(NotOwnerError):
            await self.service.reply_to_review(db_session, place.id, review_id, guest, "Hi")

        reloaded = await self.service.get_place_reviews(db_session, place.id)
        assert reloaded.reviews[0].owner_reply == "Sorry, we are hiring"
        assert reloaded.reviews[0].owner_reply_at == replied_at
