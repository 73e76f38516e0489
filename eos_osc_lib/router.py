"""
OSC Address Router

Dispatches messages to handlers registered by address pattern. Patterns are
made of `/`-separated segments:

    literal     matched verbatim                 /eos/out/cmd
    {name}      matches any one segment          /eos/out/get/cue/{cueList}/count
    *           matches the rest of the address  /eos/out/get/*   (last only)

At each segment a literal child is preferred over a parameter child. A
complete match with a handler always wins; otherwise the deepest wildcard
passed on the way down handles the message. Exactly one handler runs per
routed message.
"""

from typing import Callable, Dict, Optional, Tuple

from .errors import RouteError
from .osc import OscMessage

RouteParams = Dict[str, str]
RouteHandler = Callable[[OscMessage, RouteParams], None]

WILDCARD = "*"


class _RouteNode:
    __slots__ = ("literals", "param", "wildcard", "handler")

    def __init__(self) -> None:
        self.literals: Dict[str, "_RouteNode"] = {}
        self.param: Optional[Tuple[str, "_RouteNode"]] = None
        self.wildcard: Optional[RouteHandler] = None
        self.handler: Optional[RouteHandler] = None


def _param_name(segment: str) -> Optional[str]:
    if len(segment) >= 2 and segment[0] == "{" and segment[-1] == "}":
        return segment[1:-1]
    return None


class OscRouter:
    """Trie of address patterns."""

    def __init__(self) -> None:
        self._root = _RouteNode()

    def on(self, pattern: str, handler: RouteHandler) -> "OscRouter":
        """
        Register a handler for an address pattern.

        Args:
            pattern: Address pattern, e.g. "/eos/out/active/cue/{cueList}/{cueNumber}"
            handler: Called with (message, params)

        Returns:
            The router, so registrations can be chained

        Raises:
            RouteError: if the pattern is malformed, uses `*` anywhere but
                the last segment, names a parameter differently from an
                earlier pattern at the same position, or is already
                registered
        """
        if not pattern.startswith("/"):
            raise RouteError(f'route must start with "/": "{pattern}"')

        segments = pattern.split("/")[1:]
        node = self._root

        for position, segment in enumerate(segments):
            if segment == WILDCARD:
                if position != len(segments) - 1:
                    raise RouteError(f'wildcard must be the last segment: "{pattern}"')
                if node.wildcard is not None:
                    raise RouteError(f'a route already exists for "{pattern}"')
                node.wildcard = handler
                return self

            name = _param_name(segment)
            if name is not None:
                if not name:
                    raise RouteError(f'empty route parameter name in "{pattern}"')
                if node.param is None:
                    node.param = (name, _RouteNode())
                elif node.param[0] != name:
                    raise RouteError(
                        f'route parameters must be consistently named: "{pattern}" '
                        f'uses {{{name}}} where {{{node.param[0]}}} is registered'
                    )
                node = node.param[1]
            else:
                node = node.literals.setdefault(segment, _RouteNode())

        if node.handler is not None:
            raise RouteError(f'a route already exists for "{pattern}"')
        node.handler = handler
        return self

    def route(self, message: OscMessage) -> bool:
        """
        Dispatch a message to its most specific handler.

        Returns:
            True if a handler was invoked, False if nothing matched
        """
        node: Optional[_RouteNode] = self._root
        params: RouteParams = {}
        fallback: Optional[Tuple[RouteHandler, RouteParams]] = None

        for segment in message.address.split("/")[1:]:
            if node.wildcard is not None:
                fallback = (node.wildcard, dict(params))

            child = node.literals.get(segment)
            if child is not None:
                node = child
            elif node.param is not None:
                name, child = node.param
                params[name] = segment
                node = child
            else:
                node = None
                break

        if node is not None and node.handler is not None:
            node.handler(message, params)
            return True

        if fallback is not None:
            handler, wildcard_params = fallback
            handler(message, wildcard_params)
            return True

        return False
