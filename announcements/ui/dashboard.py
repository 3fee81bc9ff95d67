"""Streamlit dashboard to upload, score, filter and download announcements."""
from pathlib import Path
from typing import List

import streamlit as st

# Allow running via "streamlit run announcements/ui/dashboard.py" without installing the package
# by ensuring the repository root is on ``sys.path``.
if __package__ in {None, ""}:
    import sys

    sys.path.append(str(Path(__file__).resolve().parents[2]))

from announcements.core.errors import PipelineError
from announcements.core.logging import configure_logging
from announcements.core.models import ScoredRecord
from announcements.processing.pipeline import (
    PipelineState,
    PipelineStep,
    RecordFilter,
    ScoringPipeline,
    default_output_name,
    filter_records,
)
from announcements.processing.scheduler import ScoringConfig
from announcements.reporting.sinks import records_to_csv

DEFAULT_OUTPUT_NAME = "comunicados_avaliados.csv"


def progress_label(state: PipelineState) -> str:
    """Button-style label describing where the run is."""

    if state.step is PipelineStep.CLEANING:
        return "Limpando..."
    if state.step is PipelineStep.SCORING:
        return f"Analisando... ({state.processed}/{state.total})"
    return "Limpar, Analisar e Exportar"


def _run_scoring(raw: bytes) -> None:
    """Run the pipeline on the upload and keep the results in session state."""

    progress_bar = st.progress(0.0, text="Limpando...")

    def update_progress(state: PipelineState) -> None:
        fraction = state.processed / state.total if state.total else 0.0
        progress_bar.progress(fraction, text=progress_label(state))

    pipeline = ScoringPipeline(config=ScoringConfig.from_env(), on_progress=update_progress)
    try:
        state = pipeline.run_bytes(raw)
    except PipelineError as exc:
        st.session_state.records = []
        st.session_state.error = str(exc)
    else:
        st.session_state.records = state.records
        st.session_state.error = None
    finally:
        progress_bar.empty()


def _filters() -> RecordFilter:
    st.subheader("Filtros de Pesquisa")
    title_col, community_col, author_col = st.columns(3)
    return RecordFilter(
        title=title_col.text_input("Título", placeholder="Filtrar por título..."),
        community=community_col.text_input("Comunidade", placeholder="Filtrar por comunidade..."),
        author=author_col.text_input("Autor", placeholder="Filtrar por autor..."),
    )


def _results(records: List[ScoredRecord], output_name: str) -> None:
    selected = filter_records(records, _filters())
    st.subheader(f"Resultados da Análise ({len(selected)} de {len(records)})")
    st.dataframe([record.to_dict() for record in selected], use_container_width=True, hide_index=True)

    if selected:
        st.download_button(
            f"Baixar {len(selected)} registros analisados como CSV",
            data=records_to_csv(selected).encode("utf-8"),
            file_name=default_output_name(Path(output_name or DEFAULT_OUTPUT_NAME)).name,
            mime="text/csv",
        )


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="Processador Inteligente de Comunicados", layout="wide")
    st.title("Processador Inteligente de Comunicados")
    st.caption("Faça o upload, limpe, analise a qualidade com IA e filtre seus comunicados. Exporte como CSV.")

    uploaded = st.file_uploader("1. Upload do arquivo JSON", type=["json", "txt"])
    output_name = st.text_input("2. Nome do arquivo de saída", value=DEFAULT_OUTPUT_NAME)

    if st.button(progress_label(PipelineState()), disabled=uploaded is None, type="primary"):
        _run_scoring(uploaded.getvalue())

    error = st.session_state.get("error")
    if error:
        st.error(f"Erro: {error}")

    records = st.session_state.get("records") or []
    if records:
        _results(records, output_name)
    elif not error:
        st.info("Os resultados aparecerão aqui após o processamento.")


if __name__ == "__main__":
    main()
