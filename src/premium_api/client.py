"""
Premium API client.

Each remote call resets the error slot, builds a RequestSpec, validates
attachments, encodes, sends through the backend fixed at construction and
interprets the response. Nothing is raised for transport, validation or
service errors: the call returns ``None`` and :attr:`PremiumAPI.last_error_code`
says why. Inspect it right after every call; the slot carries no call identity.

Not thread-safe: use one client per thread.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from premium_api import __version__
from premium_api.config import PremiumSettings, get_settings
from premium_api.errors import DebugRecord, ErrorCode, ErrorState
from premium_api.interpreter import interpret_response
from premium_api.shared.logging import correlation_id_var, get_logger
from premium_api.transport.attachments import AttachmentRejection, validate_attachments
from premium_api.transport.capabilities import (
    CapabilityProbe,
    RuntimeCapabilityProbe,
    select_backend_tier,
)
from premium_api.transport.encoding import build_user_agent, encode_request
from premium_api.transport.factory import create_backend
from premium_api.transport.interface import (
    BackendTier,
    ParamValue,
    RequestSpec,
    TransportBackend,
    TransportFailure,
)

logger = get_logger(__name__)

# Array-valued message fields sent as one JSON string instead of name[] pairs
JSON_ENCODED_FIELDS: frozenset[str] = frozenset({"UniqueCode", "UniqueCodes"})

BackendFactory = Callable[[BackendTier, PremiumSettings], TransportBackend]


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class PremiumAPI:
    """Client for one Premium campaign."""

    def __init__(
        self,
        api_key: str,
        campaign_code: str,
        *,
        settings: PremiumSettings | None = None,
        capability_probe: CapabilityProbe | None = None,
        backend_factory: BackendFactory = create_backend,
        remote_addr: str | None = None,
    ) -> None:
        """
        Args:
            api_key: API key issued with the account data.
            campaign_code: Code of the campaign every call targets.
            settings: Transport and endpoint settings (environment by default).
            capability_probe: Decides which backend tier is usable.
            backend_factory: Builds the backend for the selected tier.
            remote_addr: Default ``IP`` for created messages.
        """
        self._settings = settings or get_settings()
        self._api_key = api_key
        self._campaign_code = campaign_code
        self._endpoint = self._settings.endpoint_prefix(api_key, campaign_code)
        self._remote_addr = remote_addr if remote_addr is not None else self._settings.remote_addr

        probe = capability_probe or RuntimeCapabilityProbe(self._settings)
        self._tier = select_backend_tier(probe)
        self._backend: TransportBackend | None = (
            backend_factory(self._tier, self._settings) if self._tier is not None else None
        )
        if self._backend is None:
            logger.warning("No HTTP backend available; every call will fail")

        self._user_agent = build_user_agent(self._settings.user_agent, __version__, self._tier)
        self._error = ErrorState()
        self._debug = DebugRecord()

    # -- read-only state --------------------------------------------------

    @property
    def last_error(self) -> str:
        return self._error.message

    @property
    def last_error_code(self) -> int:
        return self._error.code

    @property
    def last_debug_record(self) -> DebugRecord:
        return self._debug

    @property
    def backend_tier(self) -> BackendTier | None:
        return self._tier

    @property
    def user_agent(self) -> str:
        return self._user_agent

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # -- general information ----------------------------------------------

    def info_get(self) -> Any | None:
        """General information about the campaign."""
        return self._call("Info:Get")

    def statistics_general(self) -> Any | None:
        """General statistics and aggregate counts of the campaign."""
        return self._call("Statistics:General")

    # -- messages ---------------------------------------------------------

    def messages_get(self, message_id: int) -> Any | None:
        """A single message, or None if not found or inaccessible."""
        return self._call(f"Messages:Get/ID:{int(message_id)}")

    def messages_list(
        self,
        filters: Mapping[str, Any],
        range_end: Mapping[str, Any] | None = None,
        offset: int = 0,
    ) -> Any | None:
        """List messages matching the given filter.

        Args:
            filters: Field name to value (or list of values) to filter by.
            range_end: Second filter for range queries; ``filters`` holds one
                bound and this one the other. Mixing list values with ranges
                on the same field is undefined on the service side.
            offset: Offset from the start of the list; one response holds a
                limited number of messages.
        """
        return self._call(
            "Messages:List",
            {
                "Filter1": _compact_json(dict(filters)),
                "Filter2": _compact_json(dict(range_end)) if range_end else None,
                "Offset": int(offset),
            },
        )

    def messages_create(
        self,
        fields: Mapping[str, Any],
        attachments: Sequence[Any] | None = None,
    ) -> Any | None:
        """Submit a new message.

        Args:
            fields: Message fields. ``IP`` defaults to the client's remote address.
            attachments: Files to upload, as FileAttachment objects or
                mappings with ``path``, ``type`` and ``name``.
        """
        params: dict[str, ParamValue] = dict(fields)
        if not params.get("IP"):
            params["IP"] = self._remote_addr

        for name in JSON_ENCODED_FIELDS & params.keys():
            value = params[name]
            if isinstance(value, (list, tuple)):
                params[name] = _compact_json(list(value))

        return self._call("Messages:Create", params, attachments)

    # -- internals --------------------------------------------------------

    def _call(
        self,
        path: str,
        params: Mapping[str, ParamValue] | None = None,
        attachments: Sequence[Any] | None = None,
    ) -> Any | None:
        correlation_id_var.set(uuid.uuid4().hex)
        self._error.reset()

        url = self._endpoint + path
        draft = RequestSpec(url=url, params=params, attachments=tuple(attachments or ()))
        self._debug = DebugRecord(
            url=url,
            method=draft.method,
            request=dict(params) if params else None,
        )

        if self._backend is None:
            self._error.set(
                ErrorCode.CANNOT_MAKE_REQUEST,
                "No means to make a HTTP request are available (httpx, socket or url open)",
            )
            return None

        if attachments:
            if not self._backend.supports_attachments:
                self._error.set(
                    ErrorCode.ATTACHMENTS_NOT_SUPPORTED_WITH_METHOD,
                    f"File attachments are not supported by the {self._backend.tier.value} backend",
                )
                return None

            checked = validate_attachments(attachments)
            if isinstance(checked, AttachmentRejection):
                self._error.set(checked.code, checked.message)
                return None
            draft = RequestSpec(url=url, params=params, attachments=tuple(checked))
            self._debug.request = {
                **(self._debug.request or {}),
                "Attachments": [a.filename for a in checked],
            }

        try:
            encoded = encode_request(draft, self._user_agent)
        except OSError as e:
            self._error.set(ErrorCode.ATTACHMENT_FILE_NOT_READABLE, f"Cannot read attachment: {e}")
            return None

        logger.debug("Dispatching request", extra={"method": encoded.method, "path": path})
        result = self._backend.send(encoded)

        if isinstance(result, TransportFailure):
            logger.warning(
                "Request failed",
                extra={"tier": self._backend.tier.value, "error": result.message},
            )
            self._error.set(ErrorCode.REQUEST_FAILED, result.message)
            return None

        self._debug.response = result
        return interpret_response(result, self._error)
