from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional, Protocol, Sequence

from .build_config import BuildConfig
from .errors import StepFailed
from .lib.command import CmdResult, CommandError, CommandRunner
from .lib.env import Paths
from .logging_utils import BuildLogger

logger = logging.getLogger(__name__)


class Policy(str, Enum):
    FATAL = "fatal"
    BEST_EFFORT = "best-effort"


@dataclass
class BuildCtx:
    """Everything a step may touch: config, locations, command runner, log."""

    cfg: BuildConfig
    paths: Paths
    runner: CommandRunner
    log: BuildLogger

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: str | Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CmdResult:
        return self.runner.run(
            argv,
            check=False,
            env=env,
            cwd=str(cwd) if cwd is not None else None,
            dry_run=self.cfg.dry_run,
            stream=self.cfg.verbose,
        )

    def require(self, argv: Sequence[str], error: str, **kwargs) -> CmdResult:
        """Run a command whose failure ends the step."""

        r = self.run(argv, **kwargs)
        if not r.ok:
            raise StepFailed(error)
        return r

    def attempt(self, argv: Sequence[str], warning: str, **kwargs) -> bool:
        """Run a best-effort command; a failure is only a warning."""

        r = self.run(argv, **kwargs)
        if not r.ok:
            self.log.warning(warning)
        return r.ok

    def make(self, *targets: str, jobs: bool = False) -> List[str]:
        argv = ["make"]
        if jobs:
            argv.append(f"-j{self.cfg.jobs}")
        return [*argv, *targets]

    def run_make(self, *targets: str, jobs: bool = False) -> CmdResult:
        return self.run(self.make(*targets, jobs=jobs), cwd=self.cfg.kernel_dir, env=self.cfg.kernel_env)


class Step(Protocol):
    """One stage of the build. ``policy`` decides what a failure means."""

    step_id: str
    policy: Policy

    def enabled(self, cfg: BuildConfig) -> bool:
        ...

    def run(self, ctx: BuildCtx) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    skipped_steps: List[str]
    warned_steps: List[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed_step is None


def run_pipeline(*, ctx: BuildCtx, steps: Sequence[Step]) -> PipelineResult:
    """Run steps strictly in order; stop on the first fatal failure.

    Which steps run is decided once, up front, from the config.
    """

    plan = [(step, step.enabled(ctx.cfg)) for step in steps]

    ran: List[str] = []
    skipped: List[str] = []
    warned: List[str] = []

    for step, enabled in plan:
        if not enabled:
            logger.debug("Skipping step %s (disabled by config)", step.step_id)
            skipped.append(step.step_id)
            continue

        logger.debug("Running step %s", step.step_id)
        try:
            step.run(ctx)
        except (StepFailed, CommandError, OSError) as e:
            if isinstance(e, StepFailed) and e.step_id is None:
                e.step_id = step.step_id
            if step.policy is Policy.FATAL:
                ctx.log.error("%s", e)
                return PipelineResult(
                    ran_steps=ran,
                    skipped_steps=skipped,
                    warned_steps=warned,
                    failed_step=step.step_id,
                    error=str(e),
                )
            ctx.log.warning("%s (continuing)", e)
            warned.append(step.step_id)
        ran.append(step.step_id)

    return PipelineResult(ran_steps=ran, skipped_steps=skipped, warned_steps=warned)
