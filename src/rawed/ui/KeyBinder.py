# rawed/ui/KeyBinder.py
"""KeyBinder.py
==================
Description:
-----------------------
The KeyBinder class translates decoded logical keys into editor actions.

Keybindings are read from the ``[keybindings]`` section of the configuration
as human-readable strings (``"ctrl+q"``, ``"up"``, ``"pageup"``), resolved to
the integer logical keys produced by :class:`rawed.ui.KeyDecoder.KeyDecoder`,
and mapped onto the controller's action methods.

Main Methods:
1. handle_input: Dispatches one logical key to its bound action.
2. lookup: Returns the action name bound to a key specification.
3. _load_keybindings: Merges user keybindings over the defaults.
4. _decode_keystring: Turns a key specification into a logical key.
5. _setup_action_map: Builds the logical key -> method mapping.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from rawed.ui.KeyDecoder import Key, LogicalKey, ctrl_key, key_name

if TYPE_CHECKING:
    from rawed.core.Rawed import Rawed


DEFAULT_KEYBINDINGS: dict[str, list[str]] = {
    "quit": ["ctrl+q"],
    "handle_up": ["up"],
    "handle_down": ["down"],
    "handle_left": ["left"],
    "handle_right": ["right"],
    "handle_home": ["home"],
    "handle_end": ["end"],
    "handle_page_up": ["pageup"],
    "handle_page_down": ["pagedown"],
}

NAMED_KEYS: dict[str, int] = {
    "left": Key.ARROW_LEFT,
    "right": Key.ARROW_RIGHT,
    "up": Key.ARROW_UP,
    "down": Key.ARROW_DOWN,
    "home": Key.HOME,
    "end": Key.END,
    "pageup": Key.PAGE_UP,
    "pgup": Key.PAGE_UP,
    "pagedown": Key.PAGE_DOWN,
    "pgdn": Key.PAGE_DOWN,
    "delete": Key.DEL,
    "del": Key.DEL,
    "esc": Key.ESCAPE,
    "escape": Key.ESCAPE,
    "tab": 9,
    "enter": 13,  # ICRNL is off, so Enter arrives as CR
    "backspace": 127,
    "space": ord(" "),
}


# ==================== KeyBinder Class ====================
class KeyBinder:
    """Maps logical keys to the controller's actions.

    Attributes:
        editor (Rawed): The controller whose methods are bound.
        config: Application configuration (only ``keybindings`` is read).
        keybindings (dict): Action name -> list of logical keys.
        action_map (dict): Logical key -> bound method.
    """

    def __init__(self, editor: "Rawed", config: Optional[dict[str, Any]] = None):
        self.editor = editor
        self.config = config if config is not None else getattr(editor, "config", {})
        self.keybindings = self._load_keybindings()
        self.action_map = self._setup_action_map()

    # ---------------------- Handle Input --------------------
    def handle_input(self, key: LogicalKey) -> bool:
        """Runs the action bound to *key*.

        Returns:
            bool: True if an action ran, False if the key is unbound.
        """
        action = self.action_map.get(key)
        if action is None:
            logging.debug("handle_input: no action bound to %s", key_name(key))
            return False
        logging.debug("handle_input: %s -> %s", key_name(key), action.__name__)
        action()
        return True

    def _load_keybindings(self) -> dict[str, list[int]]:
        """Loads the keybindings, letting the user configuration override the defaults.

        A configured value may be a single string or a list of strings. Entries
        that fail to parse are logged and skipped; an action left with no keys
        is not bound.
        """
        user_keybindings: dict[str, Any] = self.config.get("keybindings", {}) or {}
        parsed_keybindings: dict[str, list[int]] = {}

        actions = list(DEFAULT_KEYBINDINGS) + [a for a in user_keybindings if a not in DEFAULT_KEYBINDINGS]
        for action in actions:
            spec = user_keybindings.get(action, DEFAULT_KEYBINDINGS.get(action))
            if not spec:
                logging.debug("Keybinding for action %r is disabled or empty.", action)
                continue

            specs_to_process = spec if isinstance(spec, list) else [spec]
            codes: list[int] = []
            for item in specs_to_process:
                try:
                    code = self._decode_keystring(item)
                except ValueError as e:
                    logging.error(
                        "Error parsing keybinding item %r for action %r: %s. "
                        "This specific binding for the action will be ignored.",
                        item, action, e,
                    )
                    continue
                if code not in codes:
                    codes.append(code)

            if codes:
                parsed_keybindings[action] = codes
            else:
                logging.warning(
                    "No valid key codes found for action %r after parsing. It will not be bound.",
                    action,
                )

        logging.debug("Loaded keybindings: %s", parsed_keybindings)
        return parsed_keybindings

    def _decode_keystring(self, key_input: str | int) -> int:
        """Decodes a key specification into a logical key.

        Args:
            key_input: ``"ctrl+<char>"``, a named key (``"up"``, ``"pageup"``,
                ``"esc"``...), a single character, or an integer key code.

        Raises:
            ValueError: If the specification is empty, unknown, or uses an
                unsupported modifier.
        """
        if isinstance(key_input, bool) or not isinstance(key_input, (str, int)):
            raise ValueError(f"Invalid key_input type: {type(key_input)}. Expected str or int.")
        if isinstance(key_input, int):
            return key_input

        s = key_input.strip().lower()
        if not s:
            raise ValueError("Key string cannot be empty.")

        if s in NAMED_KEYS:
            return int(NAMED_KEYS[s])

        if len(key_input.strip()) == 1:
            return ord(key_input.strip())

        modifier, _, base = s.rpartition("+")
        if modifier == "ctrl" and len(base) == 1 and (base.isalpha() or base in "@[\\]^_"):
            return ctrl_key(base)

        raise ValueError(f"Unknown key specification {key_input!r}")

    def _setup_action_map(self) -> dict[int, Callable[..., Any]]:
        """Builds the logical key -> controller method mapping."""
        action_to_method_map: dict[str, Callable[..., Any]] = {
            "quit": self.editor.quit,
            "handle_up": self.editor.handle_up,
            "handle_down": self.editor.handle_down,
            "handle_left": self.editor.handle_left,
            "handle_right": self.editor.handle_right,
            "handle_home": self.editor.handle_home,
            "handle_end": self.editor.handle_end,
            "handle_page_up": self.editor.handle_page_up,
            "handle_page_down": self.editor.handle_page_down,
        }

        final_key_action_map: dict[int, Callable[..., Any]] = {}
        for action_name, key_code_list in self.keybindings.items():
            method_callable = action_to_method_map.get(action_name)
            if method_callable is None:
                logging.warning(
                    f"Action '{action_name}' in keybindings but no corresponding method. Ignored."
                )
                continue

            for key_code in key_code_list:
                existing = final_key_action_map.get(key_code)
                if existing is not None and existing.__name__ != method_callable.__name__:
                    logging.warning(
                        f"Keybinding for action '{action_name}' (key: {key_name(key_code)}) is "
                        f"overwriting an existing mapping for method '{existing.__name__}'."
                    )
                final_key_action_map[key_code] = method_callable

        logging.debug(
            "Final constructed action map: %s",
            {key_name(k): v.__name__ for k, v in final_key_action_map.items()},
        )
        return final_key_action_map

    def lookup(self, key_spec: str | int) -> Optional[str]:
        """Finds the action name associated with a given key specification.

        Args:
            key_spec: The key string (e.g., "ctrl+q") or integer code.

        Returns:
            The name of the action (e.g., "quit") or None if not found.
        """
        try:
            decoded_key = self._decode_keystring(key_spec)
        except ValueError:
            return None

        for action_name, key_list in self.keybindings.items():
            if decoded_key in key_list:
                return action_name
        return None
