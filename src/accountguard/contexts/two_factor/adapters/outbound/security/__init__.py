from .aes_gcm_account_secret_cipher import AesGcmAccountSecretCipher
from .pyotp_totp_authenticator import PyOtpTotpAuthenticator

__all__ = [
    "AesGcmAccountSecretCipher",
    "PyOtpTotpAuthenticator",
]
