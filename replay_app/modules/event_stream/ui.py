"""
Event Stream UI

Layout for the replay tab: tx hash input, decoded event grid, hero events,
and the chain reaction flow panel.
"""

from shiny import ui

from ...services.decoders.base import ContractName, CONTRACT_COLORS, CONTRACT_SHORT


def _contract_choices():
    return {c.value: CONTRACT_SHORT[c] for c in ContractName if c is not ContractName.CRE_WORKFLOW}


def event_stream_ui():
    """Replay tab: paste receipts in, see the decoded chain reaction"""
    return ui.page_fluid(
        ui.h2("Protocol Replay"),
        ui.p("Decode transaction receipts into the cross-contract event stream", class_="text-muted mb-4"),

        # Replay input
        ui.card(
            ui.card_header("Replay Transactions"),
            ui.layout_columns(
                ui.input_text_area(
                    "replay_tx_hashes",
                    "Transaction hashes (one per line, optionally 'hash,contract,fn,step'):",
                    placeholder="0x...",
                    rows=4,
                    width="100%"
                ),
                ui.div(
                    ui.input_select(
                        "replay_default_contract",
                        "Default contract:",
                        _contract_choices(),
                        selected=ContractName.FUNDING_ENGINE.value,
                        width="100%"
                    ),
                    ui.input_text("replay_default_fn", "Default function:", value="", width="100%"),
                ),
                ui.div(
                    ui.input_action_button(
                        "replay_run",
                        "Replay",
                        class_="btn btn-primary w-100 mb-2",
                        icon=ui.span(class_="bi bi-play-fill")
                    ),
                    ui.input_action_button(
                        "replay_clear",
                        "Clear",
                        class_="btn btn-outline-secondary w-100",
                        icon=ui.span(class_="bi bi-trash")
                    ),
                ),
                col_widths=[6, 4, 2]
            ),
            ui.output_ui("replay_errors"),
            class_="mb-4"
        ),

        # Status
        ui.layout_columns(
            ui.value_box(
                "Network",
                ui.output_text("replay_network"),
                ui.output_text("replay_block"),
                theme="primary",
            ),
            ui.value_box(
                "Steps",
                ui.output_text("replay_step_count"),
                showcase=ui.span(class_="bi bi-list-ol"),
                theme="info",
            ),
            ui.value_box(
                "Events",
                ui.output_text("replay_event_count"),
                showcase=ui.span(class_="bi bi-lightning-charge"),
                theme="secondary",
            ),
            ui.value_box(
                "Hero Events",
                ui.output_text("replay_hero_count"),
                showcase=ui.span(class_="bi bi-star-fill"),
                theme="warning",
            ),
            col_widths=[3, 3, 3, 3]
        ),

        # Event grid
        ui.card(
            ui.card_header("Event Stream"),
            ui.output_data_frame("replay_events_table"),
            full_screen=True,
            class_="mt-4"
        ),

        ui.layout_columns(
            ui.card(
                ui.card_header("Hero Events"),
                ui.output_ui("replay_hero_list"),
            ),
            ui.card(
                ui.card_header("Chain Reaction"),
                ui.output_ui("replay_flow"),
            ),
            ui.card(
                ui.card_header("Protocol State"),
                ui.output_ui("replay_snapshot"),
            ),
            col_widths=[4, 4, 4],
            class_="mt-4"
        ),
    )


def hero_badge(contract: ContractName, event_name: str, args: dict):
    """One hero event row, coloured by contract"""
    color = CONTRACT_COLORS[contract]["hex"]
    detail = ", ".join(f"{k}={v}" for k, v in args.items())
    return ui.div(
        ui.span(CONTRACT_SHORT[contract], class_="badge me-2", style=f"background-color: {color};"),
        ui.strong(event_name),
        ui.div(detail, class_="small text-muted"),
        class_="mb-2"
    )


def empty_state_ui(message: str):
    return ui.div(
        ui.span(class_="bi bi-inbox fs-3 d-block mb-2"),
        ui.p(message),
        class_="text-center text-muted py-3"
    )
