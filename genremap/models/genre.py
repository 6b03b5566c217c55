"""Genre record models for the genre-map scraper.

Defines Pydantic v2 models for the records that flow through the pipeline.
All models use frozen config to enforce immutability: the single
enrichment step produces a new GenreRecord via ``model_copy(update={...})``
instead of mutating the listing record in place.

Lifecycle of a record:
    1. ``parse_listing`` builds one GenreRecord per genre on the index page
       with only the display attributes populated (the WorkItem).
    2. A dispatched unit fetches the genre's detail page, the parser returns
       a GenreDetail, and ``GenreRecord.enrich`` merges the two (the Record).
    3. The enriched record is handed to the funnel; from then on only the
       BatchWriter touches it.

Weighted lists:
    Every weight list is positionally aligned with its name list
    (``artist_weights[i]`` is the weight of ``artists[i]``).  A model
    validator rejects any instance where a pair differs in length.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

# (weights field, names field) pairs that must stay aligned.
WEIGHTED_PAIRS: tuple[tuple[str, str], ...] = (
    ("artist_weights", "artists"),
    ("sim_weights", "sim_genres"),
    ("opp_weights", "opp_genres"),
)


def _check_aligned(model: BaseModel) -> None:
    for weights_field, names_field in WEIGHTED_PAIRS:
        weights = getattr(model, weights_field)
        names = getattr(model, names_field)
        if len(weights) != len(names):
            raise ValueError(
                f"{weights_field} has {len(weights)} entries but "
                f"{names_field} has {len(names)}"
            )


class GenreDetail(BaseModel):
    """Fields scraped from a single genre's detail page."""

    model_config = ConfigDict(frozen=True)

    playlist: str = ""
    artist_weights: list[str] = Field(default_factory=list)
    artists: list[str] = Field(default_factory=list)
    sim_weights: list[str] = Field(default_factory=list)
    sim_genres: list[str] = Field(default_factory=list)
    opp_weights: list[str] = Field(default_factory=list)
    opp_genres: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _weighted_lists_aligned(self) -> GenreDetail:
        _check_aligned(self)
        return self


class GenreRecord(BaseModel):
    """A genre from the map listing, optionally enriched with detail data.

    Display attributes (font size, colour, position) come from the inline
    ``style`` of the genre's element on the index page and are kept as the
    raw CSS strings (e.g. ``"112%"``, ``"1520px"``).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Genre name as shown on the map (identifier).")
    playlist: str = ""
    font_size: str = ""
    color_hex: str = ""
    color_rgb: str = ""
    top: str = ""
    left: str = ""
    artist_weights: list[str] = Field(default_factory=list)
    artists: list[str] = Field(default_factory=list)
    sim_weights: list[str] = Field(default_factory=list)
    sim_genres: list[str] = Field(default_factory=list)
    opp_weights: list[str] = Field(default_factory=list)
    opp_genres: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _weighted_lists_aligned(self) -> GenreRecord:
        _check_aligned(self)
        return self

    def enrich(self, detail: GenreDetail) -> GenreRecord:
        """Return a copy of this record with the detail-page fields merged in.

        The detail page's playlist link replaces the listing one, even when
        empty; that is the value the enrichment fetch observed.
        """
        return self.model_copy(update=detail.model_dump())
