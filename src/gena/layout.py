"""Layout builders for the browser chat widget."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

import dash_bootstrap_components as dbc
from dash import dcc, html
from dash.development.base_component import Component as DashComponent

from .models import MAX_MESSAGE_LENGTH, USER_ROLE, ConversationTurn

REQUIRED_COMPONENT_IDS = (
    "messages_container",
    "input_textarea",
    "submit_button",
    "status_indicator",
    "history_store",
)


class Layout(ABC):
    """Interface for building the Dash component layout."""

    @abstractmethod
    def build_layout(self) -> DashComponent:
        """Constructs and returns the entire Dash component tree for the UI."""
        pass

    @abstractmethod
    def build_messages(self, records: List[Dict[str, Any]]) -> List[DashComponent]:
        """Converts stored history records into renderable components."""
        pass

    def get_external_stylesheets(self) -> List[Any]:
        return []

    def get_external_scripts(self) -> List[Any]:
        return []


class Bootstrap(Layout):
    """The default chat window, styled with Bootstrap."""

    def __init__(self, title: str = "GENA", greeting: str = "Hi! I'm GENA. How can I help you today?"):
        self.title = title
        self.greeting = greeting

    def get_external_stylesheets(self) -> List[Any]:
        return [dbc.themes.BOOTSTRAP, dbc.icons.BOOTSTRAP]

    def build_layout(self) -> DashComponent:
        return html.Div(
            className="d-flex flex-column vh-100",
            children=[
                dcc.Store(id="history_store", storage_type="session", data=[]),
                self.build_header(),
                self.build_chat_area(),
                self.build_input_area(),
            ],
        )

    def build_header(self) -> DashComponent:
        return html.Header(
            className="p-2 bg-light border-bottom",
            children=[
                dbc.Container(
                    fluid=True,
                    children=[
                        dbc.Row(
                            align="center",
                            children=[
                                dbc.Col(html.H4(self.title, className="m-0")),
                                dbc.Col(
                                    html.Span(
                                        [dbc.Spinner(size="sm"), " Typing..."],
                                        id="status_indicator",
                                        hidden=True,
                                    ),
                                    width="auto",
                                ),
                            ],
                        )
                    ],
                )
            ],
        )

    def build_chat_area(self) -> DashComponent:
        return html.Main(
            id="messages_container",
            className="flex-grow-1 p-3",
            style={"overflowY": "auto"},
            children=[self.build_message({"role": "Assistant", "text": self.greeting})],
        )

    def build_input_area(self) -> DashComponent:
        return html.Footer(
            className="p-3 bg-light border-top",
            children=[
                dbc.InputGroup(
                    [
                        dbc.Textarea(
                            id="input_textarea",
                            placeholder="Describe your symptoms or ask a question...",
                            maxLength=MAX_MESSAGE_LENGTH,
                        ),
                        dbc.Button("Send", id="submit_button", color="primary", n_clicks=0),
                    ]
                )
            ],
        )

    def build_messages(self, records: List[Dict[str, Any]]) -> List[DashComponent]:
        if not records:
            return [self.build_message({"role": "Assistant", "text": self.greeting})]
        return [self.build_message(record) for record in records]

    def build_message(self, record: Dict[str, Any]) -> DashComponent:
        """Formats a single message bubble."""
        turn = ConversationTurn.from_record(record)
        style = {
            "padding": "10px",
            "borderRadius": "15px",
            "marginBottom": "10px",
            "maxWidth": "70%",
            "width": "fit-content",
        }
        if turn.role == USER_ROLE:
            style["marginLeft"] = "auto"
            style["backgroundColor"] = "#dbeafe"
        else:
            style["marginRight"] = "auto"
            style["backgroundColor"] = "#fee2e2" if record.get("error") else "#ffffff"
            style["border"] = "1px solid #eee"

        return html.Div(dcc.Markdown(turn.text), style=style)
