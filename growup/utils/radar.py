from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from ..domain.models import MATURITY_STYLES, Pillar
from ..domain.services import order_pillars

MAX_SCORE = 5.0
LINE_COLOR = "#4f46e5"


def pillars_frame(pillars: Sequence[Pillar]) -> pd.DataFrame:
    """One row per pillar in catalog order, with its maturity presentation."""
    rows = []
    for pillar in order_pillars(pillars):
        style = MATURITY_STYLES[pillar.maturity_level]
        rows.append(
            {
                "Pillar": pillar.name,
                "Score": float(pillar.score),
                "Level": pillar.maturity_level.value,
                "Label": style.label,
                "Stage": style.stage,
                "Color": style.color,
            }
        )
    return pd.DataFrame(rows, columns=["Pillar", "Score", "Level", "Label", "Stage", "Color"])


def make_pillar_radar(pillars: Sequence[Pillar], title: str | None = None) -> go.Figure:
    """
    Radar with one spoke per pillar (0..5), markers coloured by maturity band.

    The closed polygon carries the fill; a second trace carries the markers so
    each one can take the colour of its band.
    """
    df = pillars_frame(pillars)
    fig = go.Figure()

    if not df.empty:
        r_vals = df["Score"].tolist()
        theta_vals = df["Pillar"].tolist()
        fig.add_trace(
            go.Scatterpolar(
                r=r_vals + [r_vals[0]],
                theta=theta_vals + [theta_vals[0]],
                mode="lines",
                line=dict(color=LINE_COLOR, width=2),
                fill="toself",
                fillcolor="rgba(79,70,229,0.2)",
                name="Maturidade",
                hoverinfo="skip",
            )
        )
        fig.add_trace(
            go.Scatterpolar(
                r=df["Score"],
                theta=df["Pillar"],
                mode="markers+text",
                marker=dict(size=11, color=df["Color"]),
                text=[f"{s:.1f}" for s in df["Score"]],
                textposition="top center",
                name="Pontuação",
                customdata=np.stack([df["Label"], df["Stage"]], axis=1),
                hovertemplate=(
                    "<b>%{theta}</b><br>Pontuação: %{r:.1f}"
                    "<br>%{customdata[0]} (%{customdata[1]})<extra></extra>"
                ),
            )
        )

    if title is None and not df.empty:
        lowest = df.sort_values("Score", kind="stable").iloc[0]
        title = f"Foco sugerido: {lowest['Pillar']}"

    fig.update_layout(
        title=dict(text=title or "Maturidade por Pilar", x=0.5, xanchor="center"),
        showlegend=False,
        margin=dict(l=40, r=40, t=80, b=40),
        polar=dict(
            radialaxis=dict(
                range=[0, MAX_SCORE],
                tickvals=list(range(0, int(MAX_SCORE) + 1)),
                gridcolor="#e5e7eb",
                tickfont=dict(size=10, color="#64748b"),
            ),
            angularaxis=dict(
                rotation=90,
                direction="clockwise",
                tickfont=dict(size=11, color="#475569"),
            ),
        ),
        template="plotly_white",
        height=520,
    )
    return fig
