"""
Event Stream Server Outputs

Registers server-side outputs for the replay tab: runs replays on demand,
renders the event grid, hero list, chain reaction flow and contract state.
"""

from typing import Callable, List
import logging

from shiny import reactive, render, ui
import pandas as pd

from ...services.blockchain_service import ReplayService, parse_replay_requests
from ...services.chain_flow import flow_summary
from ...services.decoders.base import EnrichedStep
from ...services.event_table import EVENT_COLUMNS, steps_to_dataframe
from .ui import empty_state_ui, hero_badge

logger = logging.getLogger(__name__)


def register_event_stream_outputs(output, input, session, service_factory: Callable[[], ReplayService]):
    """
    Wire the replay tab.

    service_factory is called lazily on the first replay so the dashboard
    still loads when the node is down.
    """
    replayed_steps = reactive.value([])
    error_messages = reactive.value([])
    service_holder = {'service': None}

    def get_service() -> ReplayService:
        if service_holder['service'] is None:
            service_holder['service'] = service_factory()
        return service_holder['service']

    # =========================================================================
    # ACTIONS
    # =========================================================================

    @reactive.effect
    @reactive.event(input.replay_run)
    def run_replay():
        """Replay every requested hash, keeping the ones that succeed"""
        errors = []
        try:
            calls = parse_replay_requests(
                input.replay_tx_hashes(),
                default_contract=input.replay_default_contract(),
                default_fn=input.replay_default_fn().strip(),
            )
        except ValueError as e:
            error_messages.set([str(e)])
            return

        if not calls:
            error_messages.set(["Enter at least one transaction hash"])
            return

        try:
            service = get_service()
        except ConnectionError as e:
            logger.error(f"Replay service unavailable: {e}")
            error_messages.set([str(e)])
            return

        steps: List[EnrichedStep] = list(replayed_steps.get())
        for call in calls:
            try:
                steps.append(service.replay(
                    call['hash'], call['step'], call['source_contract'], call['fn'],
                ))
            except Exception as e:
                logger.error(f"Replay of {call['hash']} failed: {e}")
                errors.append(f"{call['hash'][:18]}...: {e}")

        replayed_steps.set(steps)
        error_messages.set(errors)

    @reactive.effect
    @reactive.event(input.replay_clear)
    def clear_replay():
        replayed_steps.set([])
        error_messages.set([])

    # =========================================================================
    # DERIVED DATA
    # =========================================================================

    @reactive.calc
    def events_df() -> pd.DataFrame:
        return steps_to_dataframe(replayed_steps.get())

    @reactive.calc
    def flow():
        return flow_summary(replayed_steps.get())

    # =========================================================================
    # OUTPUTS
    # =========================================================================

    @output
    @render.ui
    def replay_errors():
        errors = error_messages.get()
        if not errors:
            return ui.div()
        return ui.div(
            *[ui.div(msg) for msg in errors],
            class_="alert alert-danger mt-2 mb-0"
        )

    @output
    @render.text
    def replay_network():
        replayed_steps.get()
        service = service_holder['service']
        if service is None:
            return "Not connected"
        status = service.network_status()
        if not status['connected']:
            return f"{status['network']} (offline)"
        return f"{status['network']} (chain {status['chain_id']})"

    @output
    @render.text
    def replay_block():
        replayed_steps.get()
        service = service_holder['service']
        if service is None:
            return "Replay a transaction to connect"
        block = service.network_status()['block_number']
        return f"Block {block}" if block is not None else ""

    @output
    @render.text
    def replay_step_count():
        return str(len(replayed_steps.get()))

    @output
    @render.text
    def replay_event_count():
        return str(len(events_df()))

    @output
    @render.text
    def replay_hero_count():
        df = events_df()
        return str(int(df['hero'].sum())) if not df.empty else "0"

    @output
    @render.data_frame
    def replay_events_table():
        df = events_df()
        if df.empty:
            return render.DataGrid(pd.DataFrame(columns=EVENT_COLUMNS), width="100%", height="400px")

        display_df = df.copy()
        display_df['tx_hash'] = display_df['tx_hash'].map(
            lambda h: h[:10] + "..." + h[-6:] if len(h) > 16 else h
        )
        display_df['hero'] = display_df['hero'].map(lambda h: "★" if h else "")
        return render.DataGrid(
            display_df,
            filters=True,
            width="100%",
            height="400px"
        )

    @output
    @render.ui
    def replay_hero_list():
        heroes = [e for s in replayed_steps.get() for e in s.hero_events]
        if not heroes:
            return empty_state_ui("No hero events yet")
        return ui.div(*[hero_badge(e.contract, e.event, e.args) for e in heroes])

    @output
    @render.ui
    def replay_flow():
        summary = flow()
        if not summary['active_contracts']:
            return empty_state_ui("Replay a transaction to light up the flow")

        edge_labels = summary['edge_hero_labels']
        edge_rows = []
        for edge_id in summary['active_edges']:
            labels = edge_labels.get(edge_id, [])
            edge_rows.append(ui.tags.li(
                ui.span(edge_id, class_="fw-semibold"),
                ui.span(f" ({', '.join(labels)})", class_="text-muted small") if labels else "",
            ))

        return ui.div(
            ui.p(ui.strong("Active contracts: "), ", ".join(summary['active_contracts'])),
            ui.tags.ul(*edge_rows, class_="mb-0"),
        )

    @output
    @render.ui
    def replay_snapshot():
        replayed_steps.get()
        service = service_holder['service']
        if service is None:
            return empty_state_ui("No state loaded")

        snapshot = service.snapshot()
        sections = []
        for key, values in snapshot.items():
            if values is None:
                body = ui.span("unavailable", class_="text-muted")
            else:
                body = ui.tags.ul(
                    *[ui.tags.li(f"{name}: {value}") for name, value in values.items()],
                    class_="small mb-2"
                )
            sections.append(ui.div(ui.h6(key.title()), body))
        return ui.div(*sections)
