from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional

# --- FILTER STATE ---

class Option(BaseModel):
    """
    One selectable filter value. An empty value means "no constraint".
    """
    model_config = ConfigDict(frozen=True)

    value: str = ""
    label: str = "Any"


class FilterSelection(BaseModel):
    """
    Snapshot of every search dimension for one page instance.
    Page number lives in the pagination controller, not here.
    """
    query: str = ""
    genres: List[Option] = Field(default_factory=list)
    year: Option = Field(default_factory=Option)
    season: Option = Field(default_factory=Option)
    format: Option = Field(default_factory=Option)
    status: Option = Field(default_factory=Option)
    sort_field: Option = Field(default_factory=lambda: Option(value="POPULARITY", label="Popularity"))
    sort_direction: Literal["ASC", "DESC"] = "DESC"

    @field_validator("genres")
    def genres_must_be_unique(cls, v):
        """Collapses duplicate genres while keeping display order."""
        seen = set()
        unique = []
        for genre in v:
            if genre.value not in seen:
                seen.add(genre.value)
                unique.append(genre)
        return unique

# --- REQUEST MODELS (Output to the catalog) ---

class SearchFilters(BaseModel):
    """
    Filter payload handed to fetch_advanced_search.
    Unconstrained dimensions are None and get omitted from the wire.
    """
    genres: List[str] = Field(default_factory=list)
    year: Optional[str] = None
    season: Optional[str] = None
    format: Optional[str] = None
    status: Optional[str] = None
    sort: List[str] = Field(default_factory=list)


class SearchRequest(BaseModel):
    """
    Derived from FilterSelection + page at the moment a request is issued.
    """
    model_config = ConfigDict(frozen=True)

    query: str = ""
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=17, ge=1)
    filters: SearchFilters = Field(default_factory=SearchFilters)

    @classmethod
    def from_selection(cls, selection: FilterSelection, page: int, page_size: int) -> "SearchRequest":
        return cls(
            query=selection.query,
            page=page,
            page_size=page_size,
            filters=SearchFilters(
                genres=[g.value for g in selection.genres],
                year=selection.year.value or None,
                season=selection.season.value or None,
                format=selection.format.value or None,
                status=selection.status.value or None,
                sort=[f"{selection.sort_field.value}_{selection.sort_direction}"],
            ),
        )

# --- RESPONSE MODELS (Input from the catalog) ---

class AnimeTitle(BaseModel):
    romaji: Optional[str] = None
    english: Optional[str] = None
    native: Optional[str] = None
    userPreferred: Optional[str] = None


class AnimeSummary(BaseModel):
    """
    Represents a single search result card.
    """
    model_config = ConfigDict(extra="ignore")

    id: str
    title: AnimeTitle = Field(default_factory=AnimeTitle)
    image: Optional[str] = None
    cover: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    rating: Optional[int] = None
    genres: List[str] = Field(default_factory=list)
    totalEpisodes: Optional[int] = None
    duration: Optional[int] = None
    type: Optional[str] = None
    releaseDate: Optional[int] = None
    color: Optional[str] = None

    @field_validator("id", mode="before")
    def id_as_string(cls, v):
        # The catalog sends numeric AniList ids; a null id must still fail validation
        if v is None:
            return v
        return str(v)

    @property
    def display_title(self) -> str:
        return self.title.english or self.title.romaji or self.title.userPreferred or self.id


class SearchResponse(BaseModel):
    """
    One page of catalog results.
    """
    model_config = ConfigDict(extra="ignore")

    results: List[AnimeSummary] = Field(default_factory=list)
    hasNextPage: bool = False
    currentPage: Optional[int] = None
    totalPages: Optional[int] = None
    totalResults: Optional[int] = None
