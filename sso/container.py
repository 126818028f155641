"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from sqlalchemy.engine import Engine

from sso.application.services.auth import AuthService
from sso.application.services.password_hashing import WerkzeugPasswordHasher
from sso.infrastructure.admin_setup import AdminSetup
from sso.infrastructure.db.session import create_engine_from_url
from sso.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserDirectory,
)
from sso.infrastructure.tokens.jwt_signer import JwtTokenSigner
from sso.infrastructure.tokens.redis_token_cache import RedisTokenCache
from sso.interfaces.rpc.admission import AdmissionMiddleware
from sso.interfaces.rpc.controllers.auth_controller import AuthController
from sso.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @cached_property
    def engine(self) -> Engine:
        return create_engine_from_url(
            self.config.users_storage,
            timeout=self.config.rpc.timeout.total_seconds(),
        )

    @cached_property
    def user_directory(self) -> SqlAlchemyUserDirectory:
        return SqlAlchemyUserDirectory(self.engine)

    @cached_property
    def token_cache(self) -> RedisTokenCache:
        storage = self.config.tokens_storage
        return RedisTokenCache.connect(
            storage.host,
            storage.port,
            password=storage.password,
            db=storage.db,
            timeout=self.config.rpc.timeout.total_seconds(),
        )

    @cached_property
    def token_signer(self) -> JwtTokenSigner:
        return JwtTokenSigner(self.config.secret)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(self.config.password_hash_method)

    @cached_property
    def auth_service(self) -> AuthService:
        return AuthService(
            user_changer=self.user_directory,
            user_provider=self.user_directory,
            tokens=self.token_cache,
            token_issuer=self.token_signer,
            password_hasher=self.password_hasher,
            token_ttl=self.config.token_ttl,
        )

    @cached_property
    def admission(self) -> AdmissionMiddleware:
        return AdmissionMiddleware(
            users=self.user_directory,
            tokens=self.token_cache,
            caller_header=self.config.rpc.caller_header,
        )

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            auth_service=self.auth_service,
            admission=self.admission,
            expose_domain_errors=self.config.rpc.expose_domain_errors,
        )

    @cached_property
    def admin_setup(self) -> AdminSetup:
        return AdminSetup(users=self.user_directory, changer=self.user_directory)

