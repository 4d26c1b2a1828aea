from .credential_encoding import CredentialEncoding
from .totp_hash_algorithm import TotpHashAlgorithm
from .two_factor_method import TwoFactorMethod

__all__ = [
    "CredentialEncoding",
    "TotpHashAlgorithm",
    "TwoFactorMethod",
]
