import asyncio
from typing import Dict, Mapping

import streamlit as st

from miruro_search import options
from miruro_search.config import configure_logging, get_settings
from miruro_search.options import Dimension, SortDirection
from miruro_search.page import SearchPage
from miruro_search.schemas import Option

# --- CONFIGURATION ---
PAGE_ICON = "🎬"
GRID_COLUMNS = 4

settings = get_settings()
configure_logging()


class StreamlitAddressBar:
    """st.query_params as the page's address bar. Writes replace the current entry."""

    def get_params(self) -> Mapping[str, str]:
        return st.query_params.to_dict()

    def replace_params(self, params: Mapping[str, str]) -> None:
        st.query_params.from_dict(params)


# --- SESSION STATE ---
if "search_page" not in st.session_state:
    st.session_state.search_page = SearchPage(StreamlitAddressBar(), settings=settings)
    st.session_state.load_more = False
    st.session_state.reset_requested = False

page: SearchPage = st.session_state.search_page

# The search box holds this rerun's query; the store only catches up in drive()
st.set_page_config(
    page_title=page.title_for(st.session_state.get("w_query", page.store.query)),
    page_icon=PAGE_ICON,
    layout="wide",
)

SINGLE_SELECTS = {
    "year": (Dimension.YEAR, "Year"),
    "season": (Dimension.SEASON, "Season"),
    "format": (Dimension.FORMAT, "Format"),
    "status": (Dimension.STATUS, "Airing Status"),
    "sort_field": (Dimension.SORT_FIELD, "Sort By"),
}
LABELS: Dict[Dimension, Dict[str, str]] = {
    dimension: {o.value: o.label for o in options.choices(dimension)}
    for dimension in list(Dimension)
}


def seed_widgets():
    """Copies the store into widget keys, so the widgets start (or restart) in sync."""
    st.session_state.w_query = page.store.query
    st.session_state.w_genres = [g.value for g in page.store.genres]
    for name in SINGLE_SELECTS:
        st.session_state[f"w_{name}"] = getattr(page.store, name).value
    st.session_state.w_sort_direction = page.store.sort_direction


def on_reset():
    # The store itself is reset inside drive(), where an event loop is running
    st.session_state.reset_requested = True
    st.session_state.w_genres = []
    for name in SINGLE_SELECTS:
        st.session_state[f"w_{name}"] = ""
    st.session_state.w_sort_field = options.DEFAULT_SORT.value
    st.session_state.w_sort_direction = options.DEFAULT_DIRECTION.value


def on_load_more():
    st.session_state.load_more = True


if "w_query" not in st.session_state:
    seed_widgets()


def widget_changes() -> Dict[str, object]:
    """Widget values that differ from the store, as store.update() kwargs."""
    changes = {}
    if st.session_state.w_query != page.store.query:
        changes["query"] = st.session_state.w_query
    genres = [Option(value=v, label=LABELS[Dimension.GENRES][v]) for v in st.session_state.w_genres]
    if genres != page.store.genres:
        changes["genres"] = genres
    for name, (dimension, _) in SINGLE_SELECTS.items():
        value = st.session_state[f"w_{name}"]
        if value != getattr(page.store, name).value:
            changes[name] = Option(value=value, label=LABELS[dimension][value])
    if st.session_state.w_sort_direction != page.store.sort_direction:
        changes["sort_direction"] = st.session_state.w_sort_direction
    return changes


async def drive(load_more: bool):
    """Applies this rerun's input to the page and waits for the resulting fetch."""
    if not page.mounted:
        page.mount()
    if st.session_state.reset_requested:
        page.reset_filters()
    changes = widget_changes()
    if changes:
        page.store.update(**changes)
    if load_more:
        page.request_more()
    await page.settle()


# --- SIDEBAR CONTROLS ---
with st.sidebar:
    st.title(f"{PAGE_ICON} {settings.SITE_NAME}")
    st.markdown("### ⚙️ Filters")

    st.multiselect(
        "Genres",
        options=list(LABELS[Dimension.GENRES]),
        format_func=LABELS[Dimension.GENRES].get,
        key="w_genres",
        placeholder="Any",
    )
    for name, (dimension, label) in SINGLE_SELECTS.items():
        st.selectbox(label, options=list(LABELS[dimension]), format_func=LABELS[dimension].get, key=f"w_{name}")
    st.radio(
        "Direction",
        options=[d.value for d in SortDirection],
        key="w_sort_direction",
        horizontal=True,
    )

    st.divider()
    st.button("Reset filters", on_click=on_reset, use_container_width=True)
    st.caption(f"v{settings.VERSION} | {settings.APP_NAME}")

# --- MAIN INTERFACE ---
st.text_input("Search", key="w_query", placeholder="e.g., 'Frieren'")

load_more = st.session_state.load_more
st.session_state.load_more = False
with st.spinner("Searching the catalog..."):
    asyncio.run(drive(load_more))
st.session_state.reset_requested = False

# --- RENDER RESULTS ---
results = page.results

if results.error and not results.items:
    with st.container(border=True):
        st.markdown("### 🚫 Search failed")
        st.caption(results.error)
elif not results.loading and not results.items:
    st.markdown("### No Results")
else:
    cols = st.columns(GRID_COLUMNS)
    for idx, anime in enumerate(results.items):
        with cols[idx % GRID_COLUMNS]:
            with st.container(border=True):
                if anime.image:
                    st.image(anime.image, use_container_width=True)
                st.markdown(f"**{anime.display_title}**")
                details = [str(v) for v in (anime.type, anime.releaseDate, anime.status) if v]
                if details:
                    st.caption(" · ".join(details))

    if results.error:
        st.warning(f"Could not load more results: {results.error}")
    if page.pagination.can_load_more:
        st.button("Load more", on_click=on_load_more, use_container_width=True)
