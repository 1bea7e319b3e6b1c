# hedging_strategy_app.py
# ------------------------------------------------------------
# Streamlit app: build a zero-cost FX hedging strategy, view its hedging
# profile and backtest it over a synthetic spot path.
# ------------------------------------------------------------
# Features:
# - Sidebar controls: spot, strategy template, strikes, vol, barrier
# - Strategy summary (cost, risk bucket, breakevens, greeks)
# - Hedged vs unhedged effective rate over ±30% of spot
# - Backtest table and performance metrics (random walk, seedable)
#
# Run with:  streamlit run hedging_strategy_app.py
# ------------------------------------------------------------

import datetime as dt

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from fxhedge import (
    ADVANCED_TEMPLATES,
    STRATEGY_BUILDERS,
    InvalidParameterError,
    TemplateParams,
    ZeroCostParams,
    build_strategy,
    build_template,
    describe_strategy,
    filter_rows,
    hedging_profile,
    leg_to_dict,
    load_settings,
    profile_to_frame,
    resolve_dynamic_strikes,
    rows_to_frame,
    run_backtest,
)

settings = load_settings()
ctx = settings.pricing

st.set_page_config(page_title="FX Hedging Strategies", layout="wide")
st.title("Zero-Cost FX Hedging Strategies")

# ------------------------------
# Sidebar
# ------------------------------
with st.sidebar:
    st.header("Market")
    spot = st.number_input("Spot S₀", min_value=1e-6, value=1.1000, step=0.005, format="%.6f")

    st.header("Strategy")
    library = st.radio("Library", ["Zero-cost", "Advanced"], horizontal=True)
    if library == "Zero-cost":
        labels = {key: name for key, (name, _) in STRATEGY_BUILDERS.items()}
    else:
        labels = {key: f"{t.name} ({t.complexity}; {', '.join(t.market_outlook)})"
                  for key, t in ADVANCED_TEMPLATES.items()}
    key = st.selectbox("Template", options=list(labels), format_func=labels.get)

    col1, col2 = st.columns(2)
    with col1:
        put_strike = st.number_input("Put strike (% of spot)", value=95.0, step=0.5)
        put_qty = st.number_input("Put quantity (%)", value=100.0, step=5.0)
    with col2:
        call_strike = st.number_input("Call strike (% of spot)", value=105.0, step=0.5)
        call_qty = st.number_input("Call quantity (%)", value=100.0, step=5.0)

    vol = st.number_input("Volatility σ (%/yr)", min_value=0.01, value=20.0, step=0.5)
    barrier = st.number_input("Knock-out barrier (% of spot)", value=85.0, step=0.5)
    participation = st.slider("Forward participation (%)", 0.0, 100.0, 50.0, 5.0)
    leverage = st.number_input("Leverage ratio (advanced)", min_value=0.1, value=1.5, step=0.1)
    use_barriers = st.checkbox("Barrier collar uses knock-out put", value=True)
    per_period = st.checkbox("Optimize strike per period", value=False)
    include_premium = st.checkbox("Include premium in hedged rate", value=False)

    st.header("Backtest")
    start = st.date_input("Start date", value=dt.date(2020, 1, 1))
    end = st.date_input("End date", value=dt.date(2024, 12, 31))
    periodicity = st.selectbox("Periodicity", ["daily", "weekly", "monthly"], index=0)
    capital = st.number_input("Initial capital", min_value=1.0, value=1_000_000.0, step=10_000.0)
    seed = st.number_input("Random seed (0 = none)", min_value=0, max_value=1_000_000, value=42, step=1)

params = ZeroCostParams(
    call_strike=call_strike,
    put_strike=put_strike,
    call_quantity=call_qty,
    put_quantity=put_qty,
    volatility=vol,
    barrier_level=barrier,
    participation=participation,
)

try:
    if library == "Zero-cost":
        name, legs = build_strategy(key, spot, params, optimize_per_period=per_period, context=ctx)
    else:
        template_params = TemplateParams(
            protection=put_strike,
            volatility=vol,
            hedge_ratio=put_qty,
            leverage_ratio=leverage,
            use_barriers=use_barriers,
            barrier_level=barrier,
        )
        name, legs = build_template(key, spot, template_params, context=ctx)
except InvalidParameterError as e:
    st.error(str(e))
    st.stop()

# ------------------------------
# Strategy summary
# ------------------------------
meta = describe_strategy(legs, spot, name=name, context=ctx, settings=settings.profile)

st.subheader(meta.name)
colA, colB, colC, colD = st.columns(4)
colA.metric("Expected cost (% notional)", f"{meta.expected_cost:,.4f}")
colB.metric("Risk", meta.risk_level.title())
colC.metric("Max loss vs spot", f"{meta.max_loss:,.4f}")
colD.metric("Max gain vs spot", f"{meta.max_gain:,.4f}")

st.dataframe(pd.DataFrame([leg_to_dict(leg) for leg in resolve_dynamic_strikes(legs, spot, ctx)]),
             use_container_width=True)
st.caption(
    f"Breakevens: {', '.join(f'{b:.4f}' for b in meta.breakevens) or 'none'}  |  "
    f"Δ={meta.greeks.delta:.3f}  Γ={meta.greeks.gamma:.4f}  "
    f"Θ/day={meta.greeks.theta:.5f}  Vega={meta.greeks.vega:.4f}"
)

# ------------------------------
# Hedging profile
# ------------------------------
st.subheader("Hedging profile (effective rate vs spot)")
profile = profile_to_frame(
    hedging_profile(resolve_dynamic_strikes(legs, spot, ctx), spot,
                    include_premium=include_premium, settings=settings.profile)
)

fig1, ax1 = plt.subplots(figsize=(8, 4))
ax1.plot(profile["spot"], profile["unhedged_rate"], linestyle="--", label="Unhedged")
ax1.plot(profile["spot"], profile["hedged_rate"], label="Hedged")
ax1.axvline(spot, linestyle=":", linewidth=1)
ax1.set_xlabel("Spot at maturity")
ax1.set_ylabel("Effective rate")
ax1.legend()
ax1.grid(True, alpha=0.3)
st.pyplot(fig1, clear_figure=True)

# ------------------------------
# Backtest
# ------------------------------
st.subheader("Backtest (synthetic random walk)")
if st.button("Run backtest"):
    bar = st.progress(0)
    try:
        st.session_state["backtest"] = run_backtest(
            legs, spot, start, end,
            periodicity=periodicity,
            initial_capital=capital,
            seed=int(seed) if seed else None,
            context=ctx,
            settings=settings.backtest,
            progress=lambda f: bar.progress(min(int(f * 100), 100)),
        )
    except InvalidParameterError as e:
        st.error(str(e))
        st.stop()

if "backtest" in st.session_state:
    rows, metrics = st.session_state["backtest"]
    if not rows:
        st.warning("No periods in the selected date range.")
        st.stop()

    window = st.radio("Window", ["1M", "3M", "6M", "1Y", "3Y", "ALL"], index=5, horizontal=True)
    df = rows_to_frame(filter_rows(rows, window))

    fig2, ax2 = plt.subplots(figsize=(8, 4))
    ax2.plot(pd.to_datetime(df["date"]), df["unhedged_cumulative_pnl"], label="Unhedged P&L")
    ax2.plot(pd.to_datetime(df["date"]), df["hedged_cumulative_pnl"], label="Hedged P&L")
    ax2.set_ylabel("Cumulative P&L")
    ax2.legend()
    ax2.grid(True, alpha=0.3)
    st.pyplot(fig2, clear_figure=True)

    st.write(pd.DataFrame([metrics.as_dict()]).T.rename(columns={0: "value"}))
    st.dataframe(df, use_container_width=True)

st.caption(
    "Teaching tool: premiums use a simplified Black–Scholes model without carry; "
    "barriers are treated as deterministic in/out switches and the backtest path is a uniform random walk."
)
