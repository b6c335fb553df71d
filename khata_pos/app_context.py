# khata_pos/app_context.py
"""
Services shared by every screen, built once by the shell and handed to
each module controller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from . import config
from .constants import CUST_CODE
from .database import get_store
from .database.repositories.logs_repo import LogsRepo
from .database.repositories.products_repo import ProductsRepo
from .database.repositories.settings_repo import SettingsRepo
from .database.store import AppStore
from .modules.pos.checkout import CheckoutService
from .modules.pos.session import PosSession
from .utils.auth import Authorizer
from .utils.barcode import BarcodeSource, KeyboardWedgeSource
from .utils.sound import NullSoundPlayer, SoundPlayer
from .utils.vision import VisionClient


def make_authorizer(settings: SettingsRepo) -> Authorizer:
    return Authorizer(
        admin_pin_hash=lambda: settings.admin_pin_hash,
        tech_code=lambda: settings.tech_code,
        customer_code=lambda: CUST_CODE,
    )


@dataclass
class AppContext:
    store: AppStore
    sound: object
    vision: VisionClient
    barcode_factory: Callable[[], BarcodeSource] = KeyboardWedgeSource
    settings: SettingsRepo = field(init=False)
    logs: LogsRepo = field(init=False)
    products: ProductsRepo = field(init=False)
    authorizer: Authorizer = field(init=False)
    session: PosSession = field(init=False)
    checkout: CheckoutService = field(init=False)

    def __post_init__(self) -> None:
        self.settings = SettingsRepo(self.store)
        self.logs = LogsRepo(self.store)
        self.products = ProductsRepo(self.store)
        self.authorizer = make_authorizer(self.settings)
        self.session = PosSession(self.products, self.logs, self.settings, self.authorizer)
        self.checkout = CheckoutService(self.store)


def build_context(
    store: Optional[AppStore] = None,
    *,
    play_sounds: bool = True,
    vision: Optional[VisionClient] = None,
    barcode_factory: Optional[Callable[[], BarcodeSource]] = None,
) -> AppContext:
    sound = SoundPlayer(config.DATA_PATH / "sounds") if play_sounds else NullSoundPlayer()
    return AppContext(
        store=store or get_store(),
        sound=sound,
        vision=vision or VisionClient(),
        barcode_factory=barcode_factory or KeyboardWedgeSource,
    )
