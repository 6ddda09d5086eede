"""Provisioning engine: drives reconcilers from desired resources and local state."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Literal

from iplb_provisioner.core.state import ResourceInstance, State
from iplb_provisioner.engine.errors import ApplyError, EngineError
from iplb_provisioner.engine.lock import StateLock
from iplb_provisioner.engine.reconciler import Reconciler
from iplb_provisioner.engine.types import Action, ApplyResult, ResourceChange
from iplb_provisioner.resources.markers import (
    CompareStrategy,
    build_payload,
    collect_compare_strategies,
    collect_payload_compare_strategies,
    immutable_fields,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ResourceChange, Literal["start", "done"]], None]

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from iplb_provisioner.core.client import RemoteResourceClient
    from iplb_provisioner.engine.registry import ResourceTypeRegistry
    from iplb_provisioner.resources.base import Resource


def _values_differ(desired: Any, prior: Any, *, strategy: CompareStrategy | None = None) -> bool:
    """Check whether a desired value differs from the prior (stored) value.

    With ``strategy="set"`` two lists are compared order-insensitively; every
    other case uses strict equality.
    """
    if strategy == "set" and isinstance(desired, list) and isinstance(prior, list):
        return set(desired) != set(prior)
    return desired != prior


def _diff(desired: dict[str, Any], prior: dict[str, Any], strategies: dict[str, Any]) -> dict[str, Any]:
    return {
        k: {"from": prior.get(k), "to": v}
        for k, v in desired.items()
        if _values_differ(v, prior.get(k), strategy=strategies.get(k))
    }


def _echo_attributes(prior: dict[str, Any], desired: Resource) -> dict[str, Any]:
    """Prior attributes overlaid with what the caller explicitly set."""
    explicit = desired.model_dump(
        mode="json", exclude_unset=True, exclude_none=True, exclude={"address"}
    )
    return {**prior, **explicit}


class ProvisioningEngine:
    """Terraform-like create/update/delete engine over a local state file.

    Updates always resend the full desired payload; planning only decides
    which reconciler operation each resource needs.
    """

    def __init__(
        self,
        *,
        client: RemoteResourceClient,
        state_path: Path,
        registry: ResourceTypeRegistry,
    ) -> None:
        self._reconciler: Reconciler[Any] = Reconciler(client)
        self._state_path = state_path
        self._registry = registry

    @property
    def state_path(self) -> Path:
        return self._state_path

    def _load_state(self) -> State:
        state = State.load_or_create(self._state_path)
        logger.debug("State loaded: serial=%d, %d resources", state.serial, len(state.resources))
        return state

    def _save_state(self, state: State) -> None:
        state.serial += 1
        state.save(self._state_path)

    def _record(self, inst: ResourceInstance) -> Resource:
        """Rebuild the resource record tracked by a state entry."""
        model = self._registry.get(inst.resource_type)
        record = model.model_validate(inst.attributes)
        record.resource_id = inst.resource_id
        return record

    # ── Planning ────────────────────────────────────────────────────

    def _classify_change(self, resource: Resource, state: State) -> ResourceChange:
        """Classify a single resource as CREATE, REPLACE, UPDATE or NOOP."""
        planned = build_payload(resource)
        inst = state.resources.get(resource.address)
        if inst is None:
            logger.debug("Classified %s as create", resource.address)
            return ResourceChange(
                address=resource.address,
                resource_type=resource.resource_type,
                action=Action.CREATE,
                planned=planned,
            )

        prior_record = self._record(inst)
        forced = {
            name: {"from": getattr(prior_record, name), "to": getattr(resource, name)}
            for name in immutable_fields(resource)
            if getattr(prior_record, name) != getattr(resource, name)
        }
        if forced:
            action, diff = Action.REPLACE, forced
        else:
            strategies = collect_payload_compare_strategies(resource)
            diff = _diff(planned, build_payload(prior_record), strategies)
            action = Action.UPDATE if diff else Action.NOOP

        logger.debug("Classified %s as %s", resource.address, action.value)
        return ResourceChange(
            address=resource.address,
            resource_type=resource.resource_type,
            action=action,
            prior=dict(inst.attributes),
            planned=planned,
            diff=diff or None,
        )

    @staticmethod
    def _plan_deletes(state: State, addrs: set[str]) -> list[ResourceChange]:
        return [
            ResourceChange(
                address=addr,
                resource_type=state.resources[addr].resource_type,
                action=Action.DELETE,
                prior=dict(state.resources[addr].attributes),
            )
            for addr in sorted(addrs)
        ]

    def _plan(self, resources: Sequence[Resource], state: State) -> list[ResourceChange]:
        desired_addrs: set[str] = set()
        for r in resources:
            if r.address in desired_addrs:
                raise EngineError(f"Duplicate resource address: {r.address}")
            self._registry.get(r.resource_type)
            desired_addrs.add(r.address)

        changes = [self._classify_change(r, state) for r in resources]
        changes.extend(self._plan_deletes(state, set(state.resources) - desired_addrs))
        return changes

    def validate(self, resources: Sequence[Resource]) -> None:
        """Validate every resource. Raises on the first invalid value, before any I/O."""
        for r in resources:
            self._reconciler.validate(r)

    def plan(
        self, resources: Sequence[Resource], *, destroy: bool = False
    ) -> list[ResourceChange]:
        """Compute the operations needed to converge *resources* against state."""
        logger.info("Planning %d resources (destroy=%s)", len(resources), destroy)
        state = self._load_state()
        if destroy:
            return self._plan_deletes(state, set(state.resources))
        self.validate(resources)
        return self._plan(resources, state)

    # ── Execution ───────────────────────────────────────────────────

    def _execute(self, change: ResourceChange, desired: Resource | None, state: State) -> None:
        inst = state.resources.get(change.address)
        match change.action:
            case Action.CREATE:
                assert desired is not None
                self._create(desired, state)
            case Action.UPDATE:
                assert desired is not None and inst is not None
                desired.resource_id = inst.resource_id
                self._reconciler.update(desired)
                inst.set_attributes(_echo_attributes(inst.attributes, desired))
            case Action.REPLACE:
                assert desired is not None and inst is not None
                self._reconciler.delete(self._record(inst))
                del state.resources[change.address]
                self._save_state(state)
                self._create(desired, state)
            case Action.DELETE:
                assert inst is not None
                self._reconciler.delete(self._record(inst))
                del state.resources[change.address]
            case _:
                raise ValueError(f"Unexpected action: {change.action}")

    def _create(self, desired: Resource, state: State) -> None:
        # State is authoritative; a stale identity on the config object is dropped.
        desired.resource_id = None
        try:
            self._reconciler.create(desired)
        except Exception:
            if desired.resource_id is not None:
                # The remote instance exists; track it so it is not orphaned.
                logger.warning(
                    "Create of %s failed after id %s was assigned; recording it in state",
                    desired.address,
                    desired.resource_id,
                )
                self._track(desired, state)
                self._save_state(state)
            raise
        self._track(desired, state)

    @staticmethod
    def _track(desired: Resource, state: State) -> None:
        assert desired.resource_id is not None
        inst = ResourceInstance(
            address=desired.address,
            resource_type=desired.resource_type,
            name=desired.name,
            resource_id=desired.resource_id,
        )
        inst.set_attributes(desired.attributes())
        state.resources[desired.address] = inst

    def _run(
        self,
        changes: list[ResourceChange],
        desired: dict[str, Resource],
        state: State,
        progress: ProgressCallback | None,
    ) -> ApplyResult:
        actionable = [c for c in changes if c.action != Action.NOOP]
        logger.info("Applying %d operations", len(actionable))
        applied: list[ResourceChange] = []
        for change in actionable:
            if progress:
                progress(change, "start")
            try:
                self._execute(change, desired.get(change.address), state)
            except Exception as e:
                raise ApplyError(applied=applied, address=change.address, message=str(e)) from e
            self._save_state(state)
            applied.append(change)
            if progress:
                progress(change, "done")
        return ApplyResult(applied=applied)

    def apply(
        self, resources: Sequence[Resource], *, progress: ProgressCallback | None = None
    ) -> ApplyResult:
        """Converge the remote side to *resources*, recording the outcome in state."""
        self.validate(resources)
        with StateLock(self._state_path):
            state = self._load_state()
            changes = self._plan(resources, state)
            return self._run(changes, {r.address: r for r in resources}, state, progress)

    def destroy(self, *, progress: ProgressCallback | None = None) -> ApplyResult:
        """Delete every tracked resource."""
        with StateLock(self._state_path):
            state = self._load_state()
            changes = self._plan_deletes(state, set(state.resources))
            return self._run(changes, {}, state, progress)

    def refresh(self, *, persist: bool = False) -> tuple[list[ResourceChange], State]:
        """Read every tracked resource back and report drift.

        Resources that no longer exist remotely are dropped from the returned
        state. With *persist* the refreshed state is written when it drifted;
        otherwise the caller decides whether to save it.
        """
        logger.debug("Refreshing state from the API")
        with StateLock(self._state_path):
            state = self._load_state()
            changes: list[ResourceChange] = []

            for address, inst in list(state.resources.items()):
                record = self._record(inst)
                if not self._reconciler.read(record):
                    del state.resources[address]
                    changes.append(
                        ResourceChange(
                            address=address,
                            resource_type=inst.resource_type,
                            action=Action.DELETE,
                            prior=dict(inst.attributes),
                        )
                    )
                    continue

                attrs = record.attributes()
                diff = _diff(attrs, inst.attributes, collect_compare_strategies(record))
                if diff:
                    changes.append(
                        ResourceChange(
                            address=address,
                            resource_type=inst.resource_type,
                            action=Action.UPDATE,
                            prior=dict(inst.attributes),
                            planned=attrs,
                            diff=diff,
                        )
                    )
                    inst.set_attributes(attrs)

            logger.debug("State refreshed, %d drifted", len(changes))
            if changes and persist:
                self._save_state(state)
            return changes, state
