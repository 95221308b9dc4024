"""Release pipeline state machine.

    Idle -> Building (one worker per target) -> Joining -> Publishing -> Done
                                                    \\-> Failed

Builders run on a thread pool and only ever write their own store key. The
join is store.get_all(); a failed builder abandons its key so the join fails
instead of waiting. A failed run discards the store: artifacts that did
build are never published on their own.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum, auto

from shipyard.core.project import Project
from shipyard.core.result import Err, Ok, Result
from shipyard.output.console import ConsoleProtocol
from shipyard.services.artifact_store import ArtifactStore
from shipyard.services.build_errors import BuildError, BuilderCrashError
from shipyard.services.builder import BuildResult, PlatformBuilder
from shipyard.services.release.errors import ReleaseError
from shipyard.services.release.model import PublishedRelease, Trigger
from shipyard.services.release.publisher import ReleasePublisher
from shipyard.services.targets import TARGETS, PlatformTarget, artifact_key


class PipelineState(Enum):
    IDLE = auto()
    BUILDING = auto()
    JOINING = auto()
    PUBLISHING = auto()
    DONE = auto()
    FAILED = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.FAILED)


def _empty_states() -> list[PipelineState]:
    return []


def _empty_results() -> dict[str, BuildResult]:
    return {}


def _empty_failures() -> dict[str, BuildError]:
    return {}


@dataclass
class PipelineOutcome:
    """What one run did.

    Attributes:
        state: Final state (DONE, FAILED, or IDLE when not triggered)
        history: Every state entered, in order
        results: Successful builds by os_id
        failures: Failed builds by os_id
        release: The created release, when DONE
        publish_error: Why publishing failed, if it did
    """

    state: PipelineState = PipelineState.IDLE
    history: list[PipelineState] = field(default_factory=_empty_states)
    results: dict[str, BuildResult] = field(default_factory=_empty_results)
    failures: dict[str, BuildError] = field(default_factory=_empty_failures)
    release: PublishedRelease | None = None
    publish_error: ReleaseError | None = None

    @property
    def ok(self) -> bool:
        return self.state == PipelineState.DONE


BuilderFactory = Callable[[ArtifactStore], PlatformBuilder]


class ReleasePipeline:
    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        store: ArtifactStore | None = None,
        publisher: ReleasePublisher | None = None,
        builder_factory: BuilderFactory | None = None,
    ) -> None:
        self._project = project
        self._console = console
        self._store = store or ArtifactStore(project.store_dir)
        self._publisher = publisher or ReleasePublisher(project=project, console=console)
        self._builder_factory = builder_factory or self._default_builder

    def _default_builder(self, store: ArtifactStore) -> PlatformBuilder:
        return PlatformBuilder(project=self._project, console=self._console, store=store)

    def _enter(self, outcome: PipelineOutcome, state: PipelineState) -> None:
        outcome.state = state
        outcome.history.append(state)
        self._console.header(f"== {state}")

    def run(self, trigger: Trigger) -> PipelineOutcome:
        outcome = PipelineOutcome(history=[PipelineState.IDLE])

        guard = self._publisher.check_trigger(trigger)
        if isinstance(guard, Err):
            self._console.info(guard.error.message)
            return outcome

        self._enter(outcome, PipelineState.BUILDING)
        self._store.reset()
        builder = self._builder_factory(self._store)

        with ThreadPoolExecutor(max_workers=len(TARGETS), thread_name_prefix="builder") as pool:
            futures: dict[str, Future[Result[BuildResult, BuildError]]] = {
                target.os_id: pool.submit(self._build_one, builder, target) for target in TARGETS
            }

            self._enter(outcome, PipelineState.JOINING)
            keys = tuple(artifact_key(self._project.program, t) for t in TARGETS)
            joined = self._store.get_all(keys)

            # No cancellation: wait for every builder before judging the run.
            for os_id, future in futures.items():
                match future.result():
                    case Ok(result):
                        outcome.results[os_id] = result
                    case Err(error):
                        outcome.failures[os_id] = error

        if isinstance(joined, Err) or outcome.failures:
            self._store.discard()
            self._enter(outcome, PipelineState.FAILED)
            return outcome

        self._enter(outcome, PipelineState.PUBLISHING)
        published = self._publisher.publish(trigger, self._store)
        if isinstance(published, Err):
            outcome.publish_error = published.error
            self._enter(outcome, PipelineState.FAILED)
            return outcome

        outcome.release = published.value
        self._enter(outcome, PipelineState.DONE)
        return outcome

    def _build_one(
        self, builder: PlatformBuilder, target: PlatformTarget
    ) -> Result[BuildResult, BuildError]:
        key = artifact_key(self._project.program, target)
        try:
            result = builder.build(target)
        except Exception as e:
            # A crash is one more failed target: abandon the key so the join ends.
            reason = f"{type(e).__name__}: {e}"
            self._store.abandon(key, reason)
            return Err(BuilderCrashError(os_id=target.os_id, reason=reason))
        if isinstance(result, Err):
            self._store.abandon(key, type(result.error).__name__)
        return result
