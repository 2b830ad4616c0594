from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Tuple
import jwt, string
from shop.core.config import settings

pwd_ctx = CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=settings.BCRYPT_ROUNDS)

PASSWORD_SPECIALS = '!@#$%^&*'

_GMAIL_DOMAINS = ('gmail.com', 'googlemail.com')
_ICLOUD_DOMAINS = ('icloud.com', 'me.com')
_OUTLOOK_DOMAINS = (
    'hotmail.at', 'hotmail.be', 'hotmail.ca', 'hotmail.cl', 'hotmail.co.il', 'hotmail.co.nz', 'hotmail.co.th',
    'hotmail.co.uk', 'hotmail.com', 'hotmail.com.ar', 'hotmail.com.au', 'hotmail.com.br', 'hotmail.com.gr',
    'hotmail.com.mx', 'hotmail.com.pe', 'hotmail.com.tr', 'hotmail.com.vn', 'hotmail.cz', 'hotmail.de',
    'hotmail.dk', 'hotmail.es', 'hotmail.fr', 'hotmail.hu', 'hotmail.id', 'hotmail.ie', 'hotmail.in',
    'hotmail.it', 'hotmail.jp', 'hotmail.kr', 'hotmail.lv', 'hotmail.my', 'hotmail.ph', 'hotmail.pt',
    'hotmail.sa', 'hotmail.sg', 'hotmail.sk', 'live.be', 'live.co.uk', 'live.com', 'live.com.ar',
    'live.com.mx', 'live.de', 'live.es', 'live.eu', 'live.fr', 'live.it', 'live.nl', 'msn.com', 'outlook.at',
    'outlook.be', 'outlook.cl', 'outlook.co.il', 'outlook.co.nz', 'outlook.co.th', 'outlook.com',
    'outlook.com.ar', 'outlook.com.au', 'outlook.com.br', 'outlook.com.gr', 'outlook.com.pe', 'outlook.com.tr',
    'outlook.com.vn', 'outlook.cz', 'outlook.de', 'outlook.dk', 'outlook.es', 'outlook.fr', 'outlook.hu',
    'outlook.id', 'outlook.ie', 'outlook.in', 'outlook.it', 'outlook.jp', 'outlook.kr', 'outlook.lv',
    'outlook.my', 'outlook.ph', 'outlook.pt', 'outlook.sa', 'outlook.sg', 'outlook.sk', 'passport.com',
)
_YAHOO_DOMAINS = (
    'rocketmail.com', 'yahoo.ca', 'yahoo.co.uk', 'yahoo.com', 'yahoo.de', 'yahoo.fr', 'yahoo.in', 'yahoo.it',
    'ymail.com',
)
_YANDEX_DOMAINS = ('ya.ru', 'yandex.by', 'yandex.com', 'yandex.kz', 'yandex.ru', 'yandex.ua')


def hash_password(p: str) -> str: return pwd_ctx.hash(p)

def verify_password(p: str, h: str) -> bool: return pwd_ctx.verify(p, h)

def now_utc() -> datetime: return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups.

    Lower-cases the whole address and folds provider aliases onto one mailbox:
    Gmail drops dots and ``+tag`` (``googlemail.com`` becomes ``gmail.com``),
    iCloud and Outlook/Hotmail/Live drop ``+tag``, Yahoo drops ``-tag`` and
    Yandex domains become ``yandex.ru``. The result is stable under repeated
    normalization. Raises ``ValueError`` when nothing is left of the local part.
    """
    local, _, domain = email.strip().lower().rpartition('@')
    if domain in _GMAIL_DOMAINS:
        local = local.split('+', 1)[0].replace('.', '')
        domain = 'gmail.com'
    elif domain in _ICLOUD_DOMAINS or domain in _OUTLOOK_DOMAINS:
        local = local.split('+', 1)[0]
    elif domain in _YAHOO_DOMAINS:
        local = local.split('-', 1)[0]
    elif domain in _YANDEX_DOMAINS:
        domain = 'yandex.ru'
    if not local:
        raise ValueError('Invalid email address')
    return f'{local}@{domain}'


def password_rule_violations(p: str) -> list[str]:
    problems = []
    if len(p) < 8: problems.append('Password must be at least 8 characters long')
    if not any(c in string.ascii_uppercase for c in p): problems.append('Password must contain an uppercase letter')
    if not any(c in string.ascii_lowercase for c in p): problems.append('Password must contain a lowercase letter')
    if not any(c in string.digits for c in p): problems.append('Password must contain a number')
    if not any(c in PASSWORD_SPECIALS for c in p): problems.append(f'Password must contain one of {PASSWORD_SPECIALS}')
    return problems


def create_access_token(user_id: int, role: str) -> Tuple[str, datetime]:
    exp = datetime.now(timezone.utc) + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRES_SECONDS)
    payload = {'sub': str(user_id), 'role': role, 'exp': exp, 'type': 'access'}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM), exp


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
