"""
Consultation page for the Vet Niko frontend.

Three screens rendered from one ConsultationFlow: species grid, symptom
form and the report view with read-aloud control.
"""

from nicegui import ui

from app.vet_service.species_catalog import SPECIES
from app.vet_service.utils.logger import get_logger
from frontend.state.consultation_flow import ConsultationFlow, Step

logger = get_logger(__name__, component="FRONTEND")


class BrowserAudioPlayer:
    """AudioPlayer backed by a hidden NiceGUI audio element."""

    def __init__(self, audio: ui.audio):
        self._audio = audio
        self._source = None

    def play(self, source: str) -> None:
        if source != self._source:
            self._audio.set_source(source)
            self._source = source
        self._audio.play()

    def stop(self) -> None:
        self._audio.pause()
        self._audio.seek(0)


def show_consultation_page() -> None:
    """Build the page and bind it to a fresh consultation flow."""
    logger.debug("Rendering consultation page")

    audio = ui.audio("", controls=False, autoplay=False).classes("hidden")
    flow = ConsultationFlow(
        player=BrowserAudioPlayer(audio),
        on_change=lambda: content.refresh(),
    )
    audio.on("ended", lambda _: flow.playback_ended())

    @ui.refreshable
    def content() -> None:
        _render_header(flow)

        with ui.column().classes("w-full max-w-4xl mx-auto px-4 py-8 gap-8"):
            if flow.step is Step.SELECTION:
                _render_selection(flow)
            elif flow.step is Step.SYMPTOMS:
                _render_symptoms(flow)
            elif flow.step is Step.RESULT:
                _render_result(flow)

            if flow.error:
                with ui.row().classes(
                    "w-full p-4 bg-rose-50 border border-rose-100 rounded-2xl text-rose-700 items-center gap-3"
                ):
                    ui.icon("info")
                    ui.label(flow.error)

        _render_footer()

    content()


# =================================================
# HEADER / FOOTER
# =================================================
def _render_header(flow: ConsultationFlow) -> None:
    with ui.row().classes(
        "w-full px-6 py-3 bg-white border-b border-slate-100 justify-between items-center"
    ):
        with ui.row().classes("items-center gap-2 cursor-pointer").on(
            "click", lambda _: flow.reset()
        ):
            ui.icon("medical_services", size="md", color="emerald-600")
            with ui.column().classes("gap-0"):
                ui.label("Vet Niko").classes("font-bold text-lg")
                ui.label("PROFESYONEL VETERİNER DESTEĞİ").classes(
                    "text-[10px] text-slate-500"
                )

        if flow.show_reset:
            ui.button("Başa Dön", icon="refresh", on_click=flow.reset).props(
                "flat"
            ).classes("text-slate-500")


def _render_footer() -> None:
    with ui.column().classes("w-full py-8 border-t border-slate-100 items-center"):
        ui.label("Vet Niko").classes("font-bold text-xl opacity-40")
        ui.label(
            "Hayvan sağlığı için teknoloji ile yanınızdayız."
        ).classes("text-slate-400 text-sm")


# =================================================
# STEP 1: SPECIES SELECTION
# =================================================
def _render_selection(flow: ConsultationFlow) -> None:
    with ui.column().classes("w-full items-center gap-2"):
        ui.label("Hoş Geldiniz, Ben Niko.").classes("text-4xl italic text-slate-800")
        ui.label(
            "Hangi hayvan dostumuz için yardıma ihtiyacınız var? Lütfen aşağıdan seçin."
        ).classes("text-slate-500 text-lg text-center")

    with ui.grid(columns=3).classes("w-full gap-6"):
        for species in SPECIES:
            with ui.card().classes(
                "cursor-pointer hover:shadow-xl p-0 overflow-hidden"
            ).on("click", lambda _, sid=species.id: flow.select_species(sid)):
                ui.image(species.image).classes("h-40 w-full")
                with ui.column().classes("p-4 gap-1"):
                    ui.icon(species.icon, size="md").classes(
                        f"rounded-xl p-1 {species.color}"
                    )
                    ui.label(species.name).classes("text-xl font-bold")
                    ui.label(species.description).classes("text-xs text-slate-500")


# =================================================
# STEP 2: SYMPTOMS
# =================================================
def _render_symptoms(flow: ConsultationFlow) -> None:
    species = flow.selected_species

    with ui.row().classes(
        "w-full items-center gap-4 p-4 bg-white rounded-3xl border border-slate-100"
    ):
        ui.icon(species.icon, size="lg").classes(f"rounded-2xl p-2 {species.color}")
        with ui.column().classes("gap-0"):
            ui.label(f"{species.name} Teşhis Formu").classes("text-xl font-bold")
            ui.label("Lütfen belirtileri mümkün olduğunca detaylı yazın.").classes(
                "text-sm text-slate-500"
            )

    ui.label("BELİRTİLER VE ŞİKAYETLER").classes("text-sm font-semibold text-slate-700")

    textarea = (
        ui.textarea(
            value=flow.symptoms,
            placeholder=(
                f"Örn: {species.name} son 2 gündür iştahsız, ateşi var ve çok halsiz..."
            ),
        )
        .props("outlined autofocus autogrow")
        .classes("w-full text-lg")
    )
    textarea.set_enabled(not flow.loading)

    with ui.row().classes("w-full gap-4"):
        ui.button("Geri Dön", on_click=flow.back).props("flat").classes(
            "flex-1 bg-slate-100 text-slate-500"
        )

        submit = ui.button(
            "Niko Analiz Ediyor..." if flow.loading else "Analizi Başlat",
            icon="hourglass_top" if flow.loading else "send",
            on_click=flow.submit,
        ).props("color=positive").classes("flex-[2] text-lg")
        submit.set_enabled(flow.can_submit)

    def on_symptoms_change(e) -> None:
        flow.set_symptoms(e.value)
        submit.set_enabled(flow.can_submit)

    textarea.on_value_change(on_symptoms_change)

    if flow.loading:
        ui.spinner(size="lg", color="positive").classes("self-center")

    with ui.row().classes(
        "w-full items-start gap-3 p-4 bg-amber-50 border border-amber-100 rounded-2xl text-amber-800 text-sm"
    ):
        ui.icon("warning")
        ui.markdown(
            "**Unutmayın:** Bu bilgiler yapay zeka tarafından sağlanır. "
            "Acil durumlarda hemen bir kliniğe gidin."
        )


# =================================================
# STEP 3: RESULT
# =================================================
def _render_result(flow: ConsultationFlow) -> None:
    species = flow.selected_species

    with ui.card().classes("w-full p-0 overflow-hidden rounded-[2rem]"):
        with ui.row().classes(
            "w-full bg-emerald-600 text-white p-8 items-center justify-between"
        ):
            with ui.row().classes("items-center gap-4"):
                if species:
                    ui.icon(species.icon, size="lg")
                with ui.column().classes("gap-0"):
                    ui.label("Niko'nun Teşhis Raporu").classes("font-bold text-2xl")
                    ui.label(
                        "En güncel veterinerlik verileriyle hazırlandı"
                    ).classes("text-sm text-emerald-100")

            ui.button(
                icon="volume_off" if flow.speaking else "volume_up",
                on_click=flow.toggle_speech,
            ).props("round").tooltip("Durdur" if flow.speaking else "Sesli Dinle")

        with ui.column().classes("w-full p-8"):
            ui.markdown(flow.result or "")

        with ui.row().classes(
            "w-full bg-slate-50 p-8 items-center justify-between border-t border-slate-100"
        ):
            if flow.result_at:
                ui.label(
                    f"Bu rapor {flow.result_at.strftime('%d.%m.%Y')} tarihinde "
                    "Niko AI tarafından oluşturulmuştur."
                ).classes("text-xs italic text-slate-400")

            ui.button(
                "Yeni Bir Analiz Başlat",
                icon="chevron_right",
                on_click=flow.reset,
            ).props("outline color=positive")

    with ui.grid(columns=2).classes("w-full gap-4"):
        _action_card(
            "local_hospital",
            "Yakındaki Klinikleri Bul",
            "Google Haritalar üzerinden size en yakın veterinerleri görüntüleyin.",
        )
        _action_card(
            "restaurant",
            "Beslenme Tavsiyeleri",
            "İyileşme sürecinde hayvanınızın beslenmesi için özel öneriler.",
        )


def _action_card(icon: str, title: str, text: str) -> None:
    with ui.card().classes("p-6 rounded-3xl"):
        with ui.row().classes("items-start gap-4 no-wrap"):
            ui.icon(icon, size="md", color="emerald-600")
            with ui.column().classes("gap-1"):
                ui.label(title).classes("font-bold")
                ui.label(text).classes("text-sm text-slate-600")
