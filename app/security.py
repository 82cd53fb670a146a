import enum, hmac, hashlib, json, logging, urllib.parse
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Tuple

WEBAPP_KEY_LABEL = b"WebAppData"

log = logging.getLogger(__name__)


class GateState(str, enum.Enum):
    START = "start"
    PARSED = "parsed"
    REJECTED_EMPTY = "rejected_empty"
    SIGNATURE_OK = "signature_ok"
    SIGNATURE_BAD = "signature_bad"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    user_id: Optional[int] = None


@dataclass(frozen=True)
class AuthorizationResult:
    permitted: bool
    user_id: Optional[int] = None


INVALID = VerificationResult(valid=False)
DENIED = AuthorizationResult(permitted=False)


def derive_secret_key(bot_token: str) -> bytes:
    # per Telegram docs: secret_key = HMAC_SHA256("WebAppData", bot_token)
    return hmac.new(WEBAPP_KEY_LABEL, bot_token.encode(), hashlib.sha256).digest()


def parse_init_data(init_data: str) -> List[Tuple[str, str]]:
    # init_data is the querystring Telegram hands to the WebApp
    return urllib.parse.parse_qsl(init_data, keep_blank_values=True)


def build_data_check_string(pairs: Iterable[Tuple[str, str]]) -> str:
    # str ordering is by code point, not locale; stable, so repeated keys keep arrival order
    items = sorted(((k, v) for k, v in pairs if k != "hash"), key=lambda kv: kv[0])
    return "\n".join(f"{k}={v}" for k, v in items)


def sign_init_data(pairs: Iterable[Tuple[str, str]], bot_token: str) -> str:
    """Hex signature Telegram would attach to these fields."""
    check_str = build_data_check_string(pairs)
    return hmac.new(derive_secret_key(bot_token), check_str.encode(), hashlib.sha256).hexdigest()


def extract_user_id(user_raw: Optional[str]) -> Optional[int]:
    if not user_raw:
        return None
    try:
        user = json.loads(user_raw)
    except (ValueError, RecursionError):
        return None
    if not isinstance(user, dict):
        return None
    user_id = user.get("id")
    # bool is an int subclass; a JSON true is not an id
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        return None
    return user_id


def _first_value(pairs: List[Tuple[str, str]], key: str) -> Optional[str]:
    for k, v in pairs:
        if k == key:
            return v
    return None


def _verify(init_data: str, bot_token: str) -> Tuple[GateState, VerificationResult]:
    if not init_data:
        return GateState.REJECTED_EMPTY, INVALID

    pairs = parse_init_data(init_data)
    received_hash = _first_value(pairs, "hash")
    if not received_hash:
        return GateState.REJECTED_EMPTY, INVALID

    calculated = sign_init_data(pairs, bot_token)
    # constant time; the hash is attacker controlled
    if not hmac.compare_digest(calculated.encode(), received_hash.encode()):
        return GateState.SIGNATURE_BAD, INVALID

    user_id = extract_user_id(_first_value(pairs, "user"))
    return GateState.SIGNATURE_OK, VerificationResult(valid=True, user_id=user_id)


def verify_init_data(init_data: str, bot_token: str) -> VerificationResult:
    """Check that init_data was signed by Telegram for the bot owning bot_token.

    Missing or mismatching hashes give ``VerificationResult(valid=False)``.
    A valid signature without a usable ``user.id`` still counts as valid,
    with ``user_id`` left as None.
    """
    return _verify(init_data, bot_token)[1]


def is_allowed_operator(user_id: int, allowed_ids: AbstractSet[int]) -> bool:
    if not allowed_ids:
        return True  # no restriction if not configured
    return user_id in allowed_ids


class OperatorGate:
    """Launch-data check followed by the operator allow-list.

    Both inputs are fixed at construction; the gate holds no other state and
    can be shared between concurrent requests.
    """

    def __init__(self, bot_token: str, allowed_ids: AbstractSet[int] = frozenset(),
                 logger: Optional[logging.Logger] = None):
        if not bot_token:
            raise ValueError("bot_token is required")
        self._bot_token = bot_token
        self._allowed_ids = frozenset(allowed_ids)
        self._log = logger or log

    @property
    def is_open(self) -> bool:
        return not self._allowed_ids

    def verify(self, init_data: str) -> VerificationResult:
        return verify_init_data(init_data, self._bot_token)

    def is_allowed(self, user_id: int) -> bool:
        return is_allowed_operator(user_id, self._allowed_ids)

    def evaluate(self, init_data: str) -> Tuple[GateState, AuthorizationResult]:
        state, result = _verify(init_data, self._bot_token)
        if state is not GateState.SIGNATURE_OK:
            return state, DENIED

        if result.user_id is None:
            # anonymous but verified: nothing to match against a configured list
            if self.is_open:
                return GateState.AUTHORIZED, AuthorizationResult(permitted=True)
            return GateState.UNAUTHORIZED, DENIED

        if not self.is_allowed(result.user_id):
            return GateState.UNAUTHORIZED, DENIED
        return GateState.AUTHORIZED, AuthorizationResult(permitted=True, user_id=result.user_id)

    def authorize(self, init_data: str) -> AuthorizationResult:
        state, decision = self.evaluate(init_data)
        self._log.debug("operator gate: %s (user_id=%s)", state.value, decision.user_id)
        return decision
