"""Tests for the filter engine."""

from moviestore import MovieItem, compute_matched_movies, highlight
from moviestore.filters import display_text

BEGINS = MovieItem("Batman Begins", year="2005")
LEGO = MovieItem("The Lego Batman Movie", year="2017")
DARK = MovieItem("The Dark Knight", year="2008")
MOVIES = (BEGINS, LEGO, DARK)


class TestComputeMatchedMovies:
    def test_empty_filter_is_identity(self):
        assert compute_matched_movies(MOVIES, "") is MOVIES

    def test_none_filter_is_identity(self):
        assert compute_matched_movies(MOVIES, None) is MOVIES

    def test_none_movies_treated_as_empty(self):
        assert compute_matched_movies(None, "bat") == ()
        assert compute_matched_movies(None, "") == ()

    def test_case_insensitive_substring(self):
        assert compute_matched_movies(MOVIES, "LEGO") == (LEGO,)
        assert compute_matched_movies(MOVIES, "batman") == (BEGINS, LEGO)

    def test_preserves_order(self):
        result = compute_matched_movies((DARK, LEGO, BEGINS), "the")
        assert result == (DARK, LEGO)

    def test_no_matches(self):
        assert compute_matched_movies(MOVIES, "superman") == ()

    def test_every_match_contains_filter(self):
        for needle in ("a", "The", "k", "ego"):
            for item in compute_matched_movies(MOVIES, needle):
                assert needle.lower() in item.title.lower()

    def test_mapping_items(self):
        movies = [{"title": "Batman Begins"}, {"title": "The Lego Batman Movie"}]
        assert compute_matched_movies(movies, "lego") == ({"title": "The Lego Batman Movie"},)

    def test_items_without_title(self):
        assert compute_matched_movies(["alpha", "beta"], "ALP") == ("alpha",)

    def test_mapping_matches_title_value_only(self):
        movies = [{"Title": "Alien", "Year": "1979", "Poster": "N/A"}, {"plot": "no title"}]
        assert compute_matched_movies(movies, "title") == ()
        assert compute_matched_movies(movies, "year") == ()
        assert compute_matched_movies(movies, "ALI") == (movies[0],)

    def test_callable_title_attribute_ignored(self):
        class Ticket:
            def title(self):
                return "Alien"

            def __str__(self):
                return "ticket for aliens"

        ticket = Ticket()
        assert compute_matched_movies([ticket], "ticket") == (ticket,)


class TestDisplayText:
    def test_record_uses_display_text(self):
        class Renamed(MovieItem):
            @property
            def display_text(self):
                return f"{self.title} ({self.year})"

        item = Renamed("Alien", year="1979")
        assert display_text(item) == "Alien (1979)"
        assert compute_matched_movies([item], "1979") == (item,)

    def test_movie_item(self):
        assert display_text(MovieItem("Alien")) == "Alien"

    def test_plain_string(self):
        assert display_text("alpha") == "alpha"

    def test_mapping_without_title(self):
        assert display_text({"name": "Alien"}) == ""
        assert display_text({"title": None}) == ""


class TestHighlight:
    def test_single_match(self):
        assert highlight("The Lego Batman Movie", "batman") == [
            ("The Lego ", False),
            ("Batman", True),
            (" Movie", False),
        ]

    def test_repeated_matches(self):
        assert highlight("na na", "NA") == [("na", True), (" ", False), ("na", True)]

    def test_empty_filter(self):
        assert highlight("Batman", "") == [("Batman", False)]

    def test_empty_text(self):
        assert highlight("", "bat") == []
        assert highlight(None, None) == []

    def test_no_match(self):
        assert highlight("Batman", "lego") == [("Batman", False)]
