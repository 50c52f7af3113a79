"""Add-on lifecycle controller: create, read, update, delete, exists, import.

Lifecycle of one add-on as driven by the orchestration engine:

  absent -> provisioning   create request accepted
  provisioning -> provisioned   observed by polling (create only)
  provisioned -> absent    delete request accepted

Create holds the controller's create lock for the remote create call and the
whole provisioning wait. The Platform API rejects concurrent add-on
provisioning on one account, so every create is serialized end-to-end,
including across apps. Read, update, delete and exists never take the lock.

Cancelling the task running an operation cancels the in-flight API request
or poll sleep; the create lock is released on every exit path.
"""

from __future__ import annotations

import asyncio

from ..observability import get_logger, operation_scope
from ..protocols import AddonAPI
from ..providers.heroku_client import is_not_found_error
from .errors import (
    AddonNotFound,
    AddonProvisioningError,
    AddonRemoteError,
)
from .model import PROVISIONED, PROVISIONING, AddOn, AddonResourceData
from .plan import reconcile_plan
from .schema import ADDON_SCHEMA, import_addon
from .validation import validate_addon_name
from .waiter import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    RefreshFunc,
    StateChangeWaiter,
    WaitTimeout,
)

logger = get_logger(__name__)

DEFAULT_CREATE_TIMEOUT_SECONDS = 20 * 60


class AddonController:
    """Drives add-on resources against the Platform API.

    Controllers that talk to the same account must share ``create_lock``.
    """

    def __init__(
        self,
        client: AddonAPI,
        *,
        create_lock: asyncio.Lock | None = None,
        create_timeout: float = DEFAULT_CREATE_TIMEOUT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._client = client
        self._create_lock = create_lock or asyncio.Lock()
        self._create_timeout = create_timeout
        self._poll_interval = poll_interval

    @property
    def create_lock(self) -> asyncio.Lock:
        return self._create_lock

    async def aclose(self) -> None:
        """Close the API client if it holds a connection pool."""
        close = getattr(self._client, 'aclose', None)
        if close is not None:
            await close()

    async def __aenter__(self) -> AddonController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def create(self, data: AddonResourceData) -> AddonResourceData:
        """Create the add-on, wait until provisioned, then read it back.

        Raises:
            InvalidAddonName: The configured name is invalid; nothing was sent.
            AddonRemoteError: The create request failed.
            AddonProvisioningError: The add-on was created (``data.id`` is set)
                but never reached ``provisioned``.
        """
        with operation_scope('create'):
            if data.name:
                validate_addon_name(data.name)

            app = data.app
            config = dict(data.config) if data.config else None

            async with self._create_lock:
                logger.debug(
                    'addon_create_request',
                    app=app,
                    plan=data.plan,
                    name=data.name or None,
                    config_keys=sorted(config) if config else [],
                )
                try:
                    payload = await self._client.create_addon(
                        app,
                        data.plan,
                        name=data.name or None,
                        config=config,
                        confirm=app,
                    )
                except Exception as exc:
                    raise AddonRemoteError('creating addon', exc) from exc

                addon = AddOn.from_api(payload)
                data.set_id(addon.id)
                logger.info('addon_created', addon_id=addon.id, app=app)

                await self._wait_provisioned(app, addon.id)

            return await self.read(data)

    async def read(self, data: AddonResourceData) -> AddonResourceData:
        """Refresh ``data`` from the remote add-on.

        Raises:
            AddonNotFound: The add-on is gone; the engine should prune it.
            AddonRemoteError: Any other retrieval failure.
        """
        with operation_scope('read'):
            addon = await self._retrieve(data.id)
            # Determine the plan. A configured bare slug accepts whatever
            # tier the platform picked.
            plan = reconcile_plan(addon.plan_name, data.plan)
            data.apply(addon, plan=plan)
            return data

    async def update(self, data: AddonResourceData) -> AddonResourceData:
        """Apply an in-place plan change, adopting any new id, then read back."""
        with operation_scope('update'):
            force_new = sorted(
                key for key in data.changed
                if key in ADDON_SCHEMA and ADDON_SCHEMA[key].force_new
            )
            if force_new:
                raise ValueError(
                    f'changes to {", ".join(force_new)} require replacing '
                    f'addon {data.id!r}'
                )

            if data.has_change('plan'):
                try:
                    payload = await self._client.update_addon(
                        data.app, data.id, plan=data.plan,
                    )
                except Exception as exc:
                    raise AddonRemoteError(
                        'updating addon', exc, addon_id=data.id,
                    ) from exc

                # Plan changes may move the add-on to a new id.
                new_id = AddOn.from_api(payload).id
                if new_id and new_id != data.id:
                    logger.info(
                        'addon_id_changed',
                        old_addon_id=data.id,
                        addon_id=new_id,
                        app=data.app,
                    )
                    data.set_id(new_id)

            return await self.read(data)

    async def delete(self, data: AddonResourceData) -> None:
        """Delete the add-on and clear ``data.id``."""
        with operation_scope('delete'):
            logger.info('addon_delete', addon_id=data.id, app=data.app)
            try:
                await self._client.delete_addon(data.app, data.id)
            except Exception as exc:
                raise AddonRemoteError(
                    'deleting addon', exc, addon_id=data.id,
                ) from exc
            data.set_id('')

    async def exists(self, addon_id: str) -> bool:
        """Point lookup; a ``not_found`` API error means False."""
        with operation_scope('exists'):
            try:
                await self._client.get_addon(addon_id)
            except Exception as exc:
                if is_not_found_error(exc):
                    return False
                raise AddonRemoteError(
                    'checking addon', exc, addon_id=addon_id,
                ) from exc
            return True

    async def import_state(self, addon_id: str) -> AddonResourceData:
        """Adopt an existing add-on by id."""
        with operation_scope('import'):
            return await self.read(import_addon(addon_id))

    # ── Internals ────────────────────────────────────────────────

    async def _wait_provisioned(self, app: str, addon_id: str) -> AddOn:
        logger.debug('addon_wait_provisioned', addon_id=addon_id, app=app)
        waiter: StateChangeWaiter[AddOn] = StateChangeWaiter(
            pending={PROVISIONING},
            target={PROVISIONED},
            refresh=self._state_refresh(app, addon_id),
            timeout=self._create_timeout,
            poll_interval=self._poll_interval,
        )
        try:
            addon = await waiter.wait()
        except Exception as exc:
            logger.warning(
                'addon_provision_failed',
                addon_id=addon_id,
                app=app,
                error=str(exc),
            )
            raise AddonProvisioningError(
                addon_id, exc, is_timeout=isinstance(exc, WaitTimeout),
            ) from exc
        logger.info('addon_provisioned', addon_id=addon_id, app=app)
        return addon

    def _state_refresh(self, app: str, addon_id: str) -> RefreshFunc[AddOn]:
        async def refresh() -> tuple[AddOn | None, str]:
            addon = await self._retrieve_by_app(app, addon_id)
            return addon, addon.state

        return refresh

    async def _retrieve(self, addon_id: str) -> AddOn:
        try:
            payload = await self._client.get_addon(addon_id)
        except Exception as exc:
            if is_not_found_error(exc):
                raise AddonNotFound(addon_id) from exc
            raise AddonRemoteError(
                'retrieving addon', exc, addon_id=addon_id,
            ) from exc
        return AddOn.from_api(payload)

    async def _retrieve_by_app(self, app: str, addon_id: str) -> AddOn:
        try:
            payload = await self._client.get_addon_by_app(app, addon_id)
        except Exception as exc:
            raise AddonRemoteError(
                'retrieving addon', exc, addon_id=addon_id,
            ) from exc
        return AddOn.from_api(payload)
