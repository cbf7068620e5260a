"""Dash callbacks for the browser chat widget."""

from typing import Any, Dict, List, Optional, Tuple

from dash import Input, Output, State, no_update

from .api import DEFAULT_FAILURE_RESPONSE, FAILURE_RESPONSES, InvalidMessage, validate_message
from .models import ASSISTANT_ROLE, USER_ROLE, GenerationFailure, parse_history
from .service import GenerationService


def handle_widget_message(
    service: GenerationService, user_input: Optional[str], records: Optional[List[Dict[str, Any]]]
) -> Tuple[List[Dict[str, Any]], bool]:
    """Runs one widget turn and returns the new history and whether it changed.

    Error replies are shown in the window but flagged, and are never sent
    back to the backend as context.
    """
    records = list(records or [])
    user_input = (user_input or "").strip()
    try:
        message = validate_message(user_input)
    except InvalidMessage as e:
        if e.code == "INVALID_MESSAGE":
            return records, False
        records.append({"role": ASSISTANT_ROLE, "text": e.error, "error": True})
        return records, True

    history = parse_history([r for r in records if not r.get("error")])
    records.append({"role": USER_ROLE, "text": message})

    result = service.reply(message, history)
    if isinstance(result, GenerationFailure):
        _, error = FAILURE_RESPONSES.get(result.kind, DEFAULT_FAILURE_RESPONSE)
        records.append({"role": ASSISTANT_ROLE, "text": error, "error": True})
    else:
        records.append({"role": ASSISTANT_ROLE, "text": result.text, "id": result.id})
    return records, True


def register_callbacks(app):
    @app.callback(
        [
            Output("messages_container", "children"),
            Output("history_store", "data"),
            Output("input_textarea", "value"),
            Output("submit_button", "disabled"),
        ],
        [Input("submit_button", "n_clicks")],
        [State("input_textarea", "value"), State("history_store", "data")],
        running=[(Output("status_indicator", "hidden"), False, True)],
        prevent_initial_call=True,
    )
    def send_message(n_clicks, user_input, records):
        if not n_clicks:
            return no_update, no_update, no_update, no_update

        records, changed = handle_widget_message(app.service, user_input, records)
        if not changed:
            return no_update, no_update, no_update, no_update
        return app.layout_builder.build_messages(records), records, "", False

    @app.callback(
        Output("messages_container", "children", allow_duplicate=True),
        Input("history_store", "modified_timestamp"),
        State("history_store", "data"),
        prevent_initial_call="initial_duplicate",
    )
    def restore_history(_, records):
        return app.layout_builder.build_messages(records or [])

    _register_clientside_callbacks(app)


def _register_clientside_callbacks(app):
    app.clientside_callback(
        """
        function(pathname) {
            setTimeout(function() {
                const textarea = document.getElementById('input_textarea');
                const submitButton = document.getElementById('submit_button');

                if (textarea && submitButton && !window.enterListenerSetup) {
                    window.enterListenerSetup = true;
                    textarea.addEventListener('keydown', function(e) {
                        // Shift+Enter keeps the newline
                        if (e.key === 'Enter' && !e.shiftKey) {
                            e.preventDefault();
                            if (textarea.value.trim()) {
                                submitButton.click();
                            }
                        }
                    });
                }
            }, 100);
            return window.dash_clientside.no_update;
        }
        """,
        Output("submit_button", "n_clicks", allow_duplicate=True),
        Input("messages_container", "id"),
        prevent_initial_call="initial_duplicate",
    )

    app.clientside_callback(
        """
        function(messages_content) {
            if (messages_content && messages_content.length > 0) {
                setTimeout(function() {
                    const container = document.getElementById('messages_container');
                    if (container) {
                        container.scrollTop = container.scrollHeight;
                    }
                }, 100);
            }
            return window.dash_clientside.no_update;
        }
        """,
        Output("messages_container", "data-scroll-trigger", allow_duplicate=True),
        Input("messages_container", "children"),
        prevent_initial_call=True,
    )
