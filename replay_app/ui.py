from shiny import ui as shiny_ui

from .config.network_config import NETWORK, CONTRACT_ADDRESSES
from .modules.event_stream import event_stream_ui
from .services.decoders.base import format_address


def _address_list():
    items = []
    for field, address in CONTRACT_ADDRESSES.to_dict().items():
        items.append(shiny_ui.tags.li(
            shiny_ui.span(field.replace('_', ' ').title(), class_="fw-semibold"),
            shiny_ui.br(),
            shiny_ui.code(format_address(address, 10)),
            class_="mb-2"
        ))
    return shiny_ui.tags.ul(*items, class_="list-unstyled small")


app_ui = shiny_ui.page_sidebar(
    shiny_ui.sidebar(
        shiny_ui.div(
            shiny_ui.h3("Protocol Replay", class_="app-title"),
            class_="title-container"
        ),
        shiny_ui.div(
            shiny_ui.h6("Network", class_="section-header"),
            shiny_ui.p(NETWORK),
        ),
        shiny_ui.div(
            shiny_ui.h6("Deployment", class_="section-header"),
            _address_list(),
        ),
        width=280,
    ),
    event_stream_ui(),
    title="Protocol Replay",
)
