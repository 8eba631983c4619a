from __future__ import annotations


class TokenInfoError(Exception):
    """Base class for every stage failure recorded on a TokenInfo."""


class DerivationExhausted(TokenInfoError):
    def __init__(self, program_id, attempts: int) -> None:
        super().__init__(f"no off-curve address found for program {program_id} after {attempts} bumps")
        self.program_id = program_id
        self.attempts = attempts


class FetchFailed(TokenInfoError):
    def __init__(self, address, reason: str) -> None:
        super().__init__(f"failed to fetch account {address}: {reason}")
        self.address = address
        self.reason = reason


class MalformedAccount(TokenInfoError):
    pass


class MetadataMismatch(TokenInfoError):
    def __init__(self, expected, actual) -> None:
        super().__init__(f"metadata references mint {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual


class UriUnreachable(TokenInfoError):
    def __init__(self, uri: str, reason: str) -> None:
        super().__init__(f"could not fetch {uri}: {reason}")
        self.uri = uri
        self.reason = reason


class UriInvalidJson(TokenInfoError):
    def __init__(self, uri: str, reason: str) -> None:
        super().__init__(f"{uri} did not return a JSON object: {reason}")
        self.uri = uri
        self.reason = reason
