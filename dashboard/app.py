"""
Streamlit Dashboard
Spyglass — Competitive Intelligence Briefings

Sections:
  1. Sidebar — analysis history (select / new investigation / clear)
  2. Competitor form — three slots with inline validation, standard or deep
  3. Briefing — sections revealed one at a time, narrated, traffic chart
  4. Media tools — image editor, video generator, transcriber, text-to-speech
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
import time
from typing import List, Optional

import numpy as np
import streamlit as st

from agents.audio_output import AudioSink
from agents.media import (
    AudioInput, ImageEditAgent, ImageInput, SpeechFileAgent, SpeechRequest,
    TranscriptionAgent, VideoGenerationAgent, VideoRequest,
)
from agents.orchestrator import ReportOrchestrator
from config import messages
from config.settings import settings
from models.exceptions import ExternalServiceError
from models.schemas import AnalysisMode, HistoryItem, Section, VideoOperation
from utils.audio import buffer_duration, encode_to_container_file
from utils.charts import traffic_chart
from utils.pipeline import build_orchestrator
from utils.report_parser import prepare_for_display
from utils.validation import validate_competitor

logger = logging.getLogger(__name__)

# ─── Page Config ─────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Spyglass — Inteligência Competitiva",
    page_icon="🔭",
    layout="wide",
    initial_sidebar_state="expanded",
)

# ─── Styling ─────────────────────────────────────────────────────────────────

st.markdown("""
<style>
    .stApp { background-color: #0d1117; color: #c9d1d9; }
    .stAlert { border-radius: 8px; }
</style>
""", unsafe_allow_html=True)

VIDEO_LOADING_MESSAGES = [
    "Aquecendo os motores criativos...",
    "Renderizando os primeiros quadros...",
    "Compondo a cena...",
    "Ajustando luz e movimento...",
    "Quase lá, finalizando o vídeo...",
]


# ─── Audio ───────────────────────────────────────────────────────────────────

class StreamlitAudioSink(AudioSink):
    """Plays narration through an autoplaying audio element in one placeholder."""

    def __init__(self):
        self.placeholder = None
        self._playing_until: Optional[float] = None

    def attach(self, placeholder) -> None:
        self.placeholder = placeholder

    def play(self, buffer: np.ndarray, sample_rate: int = settings.AUDIO_SAMPLE_RATE) -> None:
        if self.placeholder is None:
            return
        wav = encode_to_container_file(buffer, sample_rate)
        self.placeholder.audio(wav, format="audio/wav", autoplay=True)
        self._playing_until = time.monotonic() + buffer_duration(buffer, sample_rate)

    def stop(self) -> None:
        # Removing the element silences it in the browser
        if self.placeholder is not None:
            self.placeholder.empty()
        self._playing_until = None

    @property
    def is_playing(self) -> bool:
        return self._playing_until is not None and time.monotonic() < self._playing_until


# ─── State Management ────────────────────────────────────────────────────────

def get_state():
    if "orchestrator" not in st.session_state:
        sink = StreamlitAudioSink()
        try:
            orchestrator = build_orchestrator(audio=sink)
        except ExternalServiceError as e:
            st.error(f"❌ Serviço de geração indisponível: {e}")
            st.stop()
        st.session_state.audio_sink = sink
        st.session_state.orchestrator = orchestrator
    for key, default in (
        ("pending_confirm", None),
        ("edited_image", None),
        ("video_bytes", None),
        ("transcription", None),
        ("speech_wav", None),
    ):
        if key not in st.session_state:
            st.session_state[key] = default
    return st.session_state


def run_async(coro):
    return asyncio.run(coro)


# ─── Confirmation ────────────────────────────────────────────────────────────

def request_confirmation(action: str) -> None:
    st.session_state.pending_confirm = action
    st.rerun()


def render_confirmation(orchestrator: ReportOrchestrator, action: str) -> None:
    """Two-step confirmation for destructive or disruptive actions."""
    if st.session_state.pending_confirm != action:
        return
    text = messages.CONFIRM_CLEAR_HISTORY if action == "clear" else messages.CONFIRM_MUTE
    st.warning(text)
    col_yes, col_no = st.columns(2)
    if col_yes.button("Confirmar", key=f"confirm_{action}", type="primary"):
        st.session_state.pending_confirm = None
        if action == "clear":
            orchestrator.clear_history(lambda: True)
        else:
            orchestrator.toggle_mute(lambda: True)
        st.rerun()
    if col_no.button("Cancelar", key=f"cancel_{action}"):
        st.session_state.pending_confirm = None
        st.rerun()


# ─── Sidebar ─────────────────────────────────────────────────────────────────

def render_sidebar(orchestrator: ReportOrchestrator) -> Optional[HistoryItem]:
    selected = None
    with st.sidebar:
        st.title("🔭 Spyglass")
        st.caption("Dossiês de inteligência competitiva")

        if st.button("🔎 Nova Investigação", use_container_width=True,
                     disabled=orchestrator.is_loading):
            orchestrator.new_investigation()
            st.rerun()

        st.divider()
        st.subheader("🗂️ Histórico")
        history = orchestrator.history.items
        if not history:
            st.caption("Nenhuma análise ainda.")

        for item in history:
            active = item.id in (orchestrator.current_item_id, orchestrator.highlighted_item_id)
            label = f"{'▶ ' if active else ''}{item.label}"
            if st.button(label, key=f"history_{item.id}", use_container_width=True,
                         help=item.date, disabled=orchestrator.is_loading):
                selected = item

        if history:
            st.divider()
            if st.button("🗑️ Limpar histórico", use_container_width=True):
                request_confirmation("clear")
        render_confirmation(orchestrator, "clear")
    return selected


# ─── Competitor Form ─────────────────────────────────────────────────────────

def render_form(orchestrator: ReportOrchestrator) -> Optional[AnalysisMode]:
    st.subheader("🎯 Alvos da Investigação")
    cols = st.columns(settings.COMPETITOR_SLOTS)
    names: List[str] = []
    for i, col in enumerate(cols):
        with col:
            value = st.text_input(f"Concorrente {i + 1}", key=f"competitor_{i}",
                                  placeholder="ex.: acme.com")
            error = validate_competitor(value.strip())
            if error:
                st.caption(f":red[{error}]")
            names.append(value)
    st.session_state.competitor_names = names

    col_std, col_deep, _ = st.columns([1, 1, 2])
    disabled = orchestrator.is_loading
    if col_std.button("🚀 Analisar", type="primary", use_container_width=True, disabled=disabled):
        return AnalysisMode.STANDARD
    if col_deep.button("🧠 Investigação Profunda", use_container_width=True, disabled=disabled):
        return AnalysisMode.DEEP
    return None


# ─── Briefing ────────────────────────────────────────────────────────────────

class BriefingView:
    """Placeholders the reveal timer writes into during a script run."""

    def __init__(self, orchestrator: ReportOrchestrator):
        self.orchestrator = orchestrator
        self.progress = st.empty()
        self.body = st.empty()
        self.chart = st.empty()

    def render(self, section: Optional[Section] = None) -> None:
        scheduler = self.orchestrator.scheduler
        if scheduler.total:
            self.progress.progress(
                scheduler.revealed / scheduler.total,
                text=f"Seção {scheduler.revealed} de {scheduler.total}",
            )
        with self.body.container():
            for visible in scheduler.visible_sections:
                st.markdown(prepare_for_display(visible.text))
        records = scheduler.traffic_data
        if records:
            self.chart.plotly_chart(traffic_chart(records), use_container_width=True)
        else:
            self.chart.empty()


async def _present(orchestrator: ReportOrchestrator, start):
    """Run `start`, then keep this script run alive until the reveal finishes."""
    result = await start
    await orchestrator.scheduler.wait()
    await orchestrator.narrator.drain()
    return result


async def _resume(orchestrator: ReportOrchestrator) -> None:
    orchestrator.scheduler.start()
    await orchestrator.scheduler.wait()
    await orchestrator.narrator.drain()


def render_briefing(
    orchestrator: ReportOrchestrator,
    mode: Optional[AnalysisMode],
    selected: Optional[HistoryItem] = None,
) -> None:
    view = BriefingView(orchestrator)
    orchestrator.scheduler.on_reveal = view.render

    if mode is not None:
        with st.spinner("🕵️ Reunindo inteligência..."):
            result = run_async(_present(
                orchestrator,
                orchestrator.analyze(st.session_state.competitor_names, mode),
            ))
        if not result.success:
            st.error(result.error)
            return
    elif selected is not None:
        run_async(_present(orchestrator, orchestrator.select_history_item(selected)))
    elif orchestrator.scheduler.is_presenting:
        # The previous script run was interrupted mid-reveal
        view.render()
        run_async(_resume(orchestrator))

    if orchestrator.error:
        st.error(orchestrator.error)
    if orchestrator.report is None:
        st.info(
            "👆 **Informe até três concorrentes e clique em 'Analisar'** "
            "para gerar um dossiê narrado."
        )
        return

    view.render()
    st.divider()
    col_brief, col_download = st.columns(2)
    if col_brief.button("🎬 Briefing Cinematográfico", use_container_width=True,
                        disabled=orchestrator.context.muted):
        with st.spinner("Preparando o briefing..."):
            result = run_async(orchestrator.cinematic_briefing())
        if result.success:
            st.success(f"🎙️ {result.data}")
        else:
            st.error(result.error)
    col_download.download_button(
        "⬇️ Baixar relatório (.md)",
        data=orchestrator.report,
        file_name="spyglass-relatorio.md",
        mime="text/markdown",
        use_container_width=True,
    )


# ─── Media Tools ─────────────────────────────────────────────────────────────

def render_image_editor(orchestrator: ReportOrchestrator) -> None:
    st.subheader("🖼️ Editor de Imagem")
    upload = st.file_uploader("Imagem", type=["png", "jpg", "jpeg", "webp"], key="image_upload")
    instruction = st.text_input("O que mudar?", key="image_instruction",
                                placeholder="ex.: adicione um filtro retrô")
    if upload is not None:
        st.image(upload.getvalue(), caption="Original", width=320)
    if st.button("✨ Editar imagem", disabled=upload is None or not instruction.strip()):
        agent = ImageEditAgent(orchestrator.service)
        with st.spinner("Editando..."):
            result = run_async(agent.execute(ImageInput(upload.getvalue(), upload.type, instruction)))
        if result.success:
            st.session_state.edited_image = result.data
        else:
            st.error(result.error)
    if st.session_state.edited_image:
        st.image(st.session_state.edited_image, caption="Editada", width=320)


def render_video_generator(orchestrator: ReportOrchestrator) -> None:
    st.subheader("🎞️ Gerador de Vídeo")
    upload = st.file_uploader("Imagem inicial", type=["png", "jpg", "jpeg"], key="video_upload")
    instruction = st.text_input("Descreva a animação", key="video_instruction")
    aspect_ratio = st.radio("Proporção", settings.VIDEO_ASPECT_RATIOS, horizontal=True)

    if st.button("🎬 Gerar vídeo", disabled=upload is None or not instruction.strip()):
        status = st.empty()

        def on_poll(operation: VideoOperation, polls: int) -> None:
            status.info(VIDEO_LOADING_MESSAGES[polls % len(VIDEO_LOADING_MESSAGES)])

        status.info(VIDEO_LOADING_MESSAGES[0])
        agent = VideoGenerationAgent(orchestrator.service, on_poll=on_poll)
        request = VideoRequest(ImageInput(upload.getvalue(), upload.type, instruction), aspect_ratio)
        result = run_async(agent.execute(request))
        status.empty()
        if result.success:
            st.session_state.video_bytes = result.data
        else:
            st.error(result.error)
    if st.session_state.video_bytes:
        st.video(st.session_state.video_bytes, format="video/mp4")


def render_transcriber(orchestrator: ReportOrchestrator) -> None:
    st.subheader("🎙️ Transcritor de Áudio")
    recording = st.audio_input("Grave uma mensagem")
    if st.button("📝 Transcrever", disabled=recording is None):
        agent = TranscriptionAgent(orchestrator.service)
        with st.spinner("Transcrevendo..."):
            result = run_async(agent.execute(AudioInput(recording.getvalue(), recording.type or "audio/wav")))
        if result.success:
            st.session_state.transcription = result.data
        else:
            st.error(result.error)
    if st.session_state.transcription:
        st.text_area("Transcrição", st.session_state.transcription, height=160)


def render_text_to_speech(orchestrator: ReportOrchestrator) -> None:
    st.subheader("🔊 Texto para Fala")
    text = st.text_area("Texto", key="tts_text", height=120)
    voice = st.selectbox("Voz", settings.VOICES, index=settings.VOICES.index(settings.NARRATION_VOICE))
    if st.button("🗣️ Gerar áudio", disabled=not text.strip()):
        agent = SpeechFileAgent(orchestrator.service)
        with st.spinner("Sintetizando..."):
            result = run_async(agent.execute(SpeechRequest(text, voice)))
        if result.success:
            st.session_state.speech_wav = result.data
        else:
            st.error(result.error)
    if st.session_state.speech_wav:
        st.audio(st.session_state.speech_wav, format="audio/wav")
        st.download_button("⬇️ Baixar WAV", st.session_state.speech_wav,
                           file_name="spyglass-fala.wav", mime="audio/wav")


# ─── Main App ────────────────────────────────────────────────────────────────

def main():
    state = get_state()
    orchestrator: ReportOrchestrator = state.orchestrator

    header, mute_col = st.columns([5, 1])
    header.title("🔭 Spyglass")
    header.caption("Briefings de inteligência competitiva, revelados seção a seção")
    mute_label = "🔇 Narração desligada" if orchestrator.context.muted else "🔊 Narração ligada"
    if mute_col.button(mute_label, use_container_width=True):
        if orchestrator.context.muted:
            orchestrator.toggle_mute(lambda: True)
            st.rerun()
        else:
            request_confirmation("mute")

    render_confirmation(orchestrator, "mute")
    selected = render_sidebar(orchestrator)
    state.audio_sink.attach(st.empty())

    tab_briefing, tab_image, tab_video, tab_audio, tab_tts = st.tabs([
        "📋 Briefing",
        "🖼️ Imagem",
        "🎞️ Vídeo",
        "🎙️ Transcrição",
        "🔊 Fala",
    ])

    with tab_briefing:
        mode = render_form(orchestrator)
        st.divider()
        render_briefing(orchestrator, mode, selected)
    with tab_image:
        render_image_editor(orchestrator)
    with tab_video:
        render_video_generator(orchestrator)
    with tab_audio:
        render_transcriber(orchestrator)
    with tab_tts:
        render_text_to_speech(orchestrator)


if __name__ == "__main__":
    main()
