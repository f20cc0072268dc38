from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandError(RuntimeError):
    def __init__(self, result: CmdResult):
        self.result = result
        super().__init__(
            f"Command failed ({result.returncode}): {fmt_argv(result.argv)}\n{result.stderr}".rstrip()
        )


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """Runs external tools and hands back a structured result.

    Steps never look at raw ``subprocess`` objects; they only see
    :class:`CmdResult`, so tests can swap in a scripted runner.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = False,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
        dry_run: bool = False,
        stream: bool = False,
    ) -> CmdResult:
        """Run ``argv``; with ``stream`` each output line is logged as it arrives.

        Streaming merges stderr into stdout, so ``CmdResult.stderr`` is empty.
        """

        argv_list = list(argv)
        logger.info("CMD %s", fmt_argv(argv_list))

        if dry_run:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        full_env = dict(os.environ, **(env or {}))
        try:
            if stream:
                result = self._run_streaming(argv_list, env=full_env, cwd=cwd)
            else:
                p = subprocess.run(
                    argv_list,
                    text=True,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    cwd=cwd,
                    env=full_env,
                )
                result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
        except OSError as e:
            # Missing binary or bad cwd; report it like any other failed command.
            result = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

        if not stream and result.stdout:
            logger.debug("STDOUT %s", result.stdout.strip())
        if result.stderr:
            logger.debug("STDERR %s", result.stderr.strip())

        if check and not result.ok:
            raise CommandError(result)

        return result

    def _run_streaming(self, argv: list[str], *, env: Mapping[str, str], cwd: str | None) -> CmdResult:
        lines: list[str] = []
        with subprocess.Popen(
            argv,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            cwd=cwd,
            env=env,
        ) as p:
            assert p.stdout is not None
            for line in p.stdout:
                logger.debug("| %s", line.rstrip("\n"))
                lines.append(line)
        return CmdResult(argv=argv, returncode=p.returncode, stdout="".join(lines), stderr="")
