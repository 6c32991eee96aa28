import random

from fastapi import Request

from quizgate.core.config import Settings
from quizgate.services.ledger import AnalyticsLedger
from quizgate.services.notifier import EmailNotifier
from quizgate.services.tokens import TokenIssuer
from quizgate.services.vault import VaultClient
from quizgate.utils.helpers import Clock

# Components are built once in create_app() and kept on app.state.

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_vault(request: Request) -> VaultClient:
    return request.app.state.vault

def get_ledger(request: Request) -> AnalyticsLedger:
    return request.app.state.ledger

def get_notifier(request: Request) -> EmailNotifier:
    return request.app.state.notifier

def get_issuer(request: Request) -> TokenIssuer:
    return request.app.state.issuer

def get_rng(request: Request) -> random.Random:
    return request.app.state.rng

def get_clock(request: Request) -> Clock:
    return request.app.state.clock
