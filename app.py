import pandas as pd
import streamlit as st

from diversity.charts import product_chart
from diversity.data import load_dashboard_data
from diversity.filters import PLACEHOLDER
from diversity.quality import compute_debug
from diversity.view import SelectionState


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin: 6px 0 10px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def format_selection_summary(state: SelectionState) -> str:
    county = state.selection.county or "All"
    market = state.selection.market or "All"
    growers = state.view["grower"].nunique() if not state.view.empty else 0
    chips = [f"County: {county}", f"Market: {market}", f"Growers: {growers}"]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def sync_widgets(state: SelectionState):
    st.session_state["county"] = state.selection.county or PLACEHOLDER
    st.session_state["market"] = state.selection.market or PLACEHOLDER


def get_state(grower_table: pd.DataFrame, county_choices) -> SelectionState:
    state = st.session_state.get("selection_state")
    if state is None or state.grower_table is not grower_table:
        state = SelectionState(grower_table, county_choices)
        state.subscribe(sync_widgets)
        st.session_state["selection_state"] = state
        sync_widgets(state)
    return state


def on_county_change():
    st.session_state["selection_state"].select_county(st.session_state.get("county"))


def on_market_change():
    st.session_state["selection_state"].select_market(st.session_state.get("market"))


# ---------- UI setup ----------
st.set_page_config(page_title="Farmers Market Product Diversity", layout="wide")
inject_base_styles()
st.title("Farmers Market Product Diversity")
st.caption("Distinct vegetables, fruits and herbs offered by each grower, by county and market.")

data_ctx = load_dashboard_data()
grower_table = data_ctx.get("grower_table", pd.DataFrame())
if grower_table.empty:
    st.error("No grower data found. Run build_snapshot.py or place growers.pkl in the data directory.")
    st.stop()

state = get_state(grower_table, data_ctx.get("county_choices", []))

with st.sidebar:
    st.markdown("### Filters")
    st.selectbox("County", options=state.county_options, key="county", on_change=on_county_change)
    st.selectbox("Market", options=state.market_options, key="market", on_change=on_market_change)
    st.markdown("---")
    st.caption(f"Data source: {data_ctx.get('source')} ({', '.join(data_ctx.get('files', []))})")

st.markdown(f"<div class='chip-row'>{format_selection_summary(state)}</div>", unsafe_allow_html=True)

if state.view.empty:
    st.info("No growers match the current selection.")
st.altair_chart(
    product_chart(state.view, interactive=True, title="Number of products by grower"),
    use_container_width=True,
)

if not state.view.empty:
    st.download_button(
        "Export CSV",
        data=state.view.to_csv(index=False).encode("utf-8"),
        file_name="product_diversity.csv",
        mime="text/csv",
    )

with st.expander("Data quality", expanded=False):
    debug = compute_debug(data_ctx)
    cols = st.columns(4)
    cols[0].metric("Growers", f"{debug['row_counts']['growers']:,}")
    cols[1].metric("Markets", f"{debug['row_counts']['markets']:,}")
    cols[2].metric("Counties", f"{debug['row_counts']['counties']:,}")
    cols[3].metric("Zero-product growers", f"{len(debug['zero_product_growers']):,}")
    if debug["unmatched_markets"]:
        st.markdown("**Markets without a county match**")
        st.dataframe(pd.DataFrame(debug["unmatched_markets"]), hide_index=True, use_container_width=True)
    if debug["inconsistent_counts"]:
        st.warning("Growers with conflicting product counts: " + ", ".join(debug["inconsistent_counts"]))
