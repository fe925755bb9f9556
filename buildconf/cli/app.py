from __future__ import annotations

import typer

from buildconf.cli.context import build_context
from buildconf.core.errors import ErrorCode, UnknownFlag
from buildconf.core.flags import FlagSet, PythonVariant
from buildconf.core.result import Err, Ok
from buildconf.output.console import RichConsole, Style
from buildconf.output.errors import configure_error_exit_code, print_configure_error
from buildconf.services.configure import ConfigureService

app = typer.Typer(add_completion=False, no_args_is_help=False)

# --help is a regular flag here (it exits 1), and unknown options are collected
# so they can be reported with exit 1 instead of click's usage error.
_CONTEXT_SETTINGS = {
    "help_option_names": [],
    "ignore_unknown_options": True,
    "allow_extra_args": True,
}


def _ask(message: str) -> str:
    return typer.prompt(message, default="", show_default=False)


@app.command(context_settings=_CONTEXT_SETTINGS)
def configure(
    ctx: typer.Context,
    toolchain: str = typer.Option(
        "",
        "--toolchain",
        help='Toolchain archive on disk, a URL to one, or "default" to pick the published one.',
    ),
    cuda: bool = typer.Option(
        False,
        "--cuda/--no_cuda",
        help="Select a CUDA toolchain if available (default: CUDA-less).",
    ),
    cleanup: bool = typer.Option(False, "--cleanup", help="Clean up everything and exit."),
    cleanup_if_invalid: bool = typer.Option(
        False,
        "--cleanup_if_invalid",
        help="Clean up everything if the toolchain version is out of date.",
    ),
    yes: bool = typer.Option(False, "--yes", help="Answer yes to the cleanup prompt."),
    cmake_only: bool = typer.Option(
        False, "--cmake_only", help="Only run cmake, without obtaining a new toolchain."
    ),
    python_only: bool = typer.Option(
        False, "--python_only", help="Only run python dependency installation."
    ),
    python3: bool = typer.Option(False, "--python3", help="Use Python 3.4 (default 2.7)."),
    python35: bool = typer.Option(False, "--python3.5", help="Use Python 3.5 (default 2.7)."),
    r_integration: bool = typer.Option(
        False, "--R_integration", help="Install the R runtime and enable R integration (beta)."
    ),
    define: list[str] = typer.Option(
        [],
        "-D",
        metavar="VAR=VALUE",
        help="CFLAGS definition passed on to cmake. Repeatable.",
    ),
    help_: bool = typer.Option(False, "--help", help="Show this message and exit."),
) -> None:
    """Configure the build with the specified toolchain.

    Re-running reconfigures with no changes. To rebuild with a new toolchain,
    clean everything (--cleanup) and run again.

    \b
    Examples:
      buildconf                                  existing or default toolchain
      buildconf --cleanup                        remove all build directories
      buildconf --toolchain=default              download the default toolchain
      buildconf --toolchain=dato_deps_linux_gcc_4.9.2.tar.gz
      buildconf --toolchain=https://host/dato-deps/1/dato_deps_linux_gcc_4.9.2.tar.gz
    """
    if help_:
        text = ctx.get_help()
        if text:
            typer.echo(text)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if ctx.args:
        error = UnknownFlag(flag=ctx.args[0])
        print_configure_error(error, RichConsole(stderr=True))
        raise typer.Exit(code=configure_error_exit_code(error))

    requested = ((PythonVariant.PY34, python3), (PythonVariant.PY35, python35))
    flags = FlagSet(
        cleanup=cleanup,
        cleanup_if_invalid=cleanup_if_invalid,
        default_yes=yes,
        cmake_only=cmake_only,
        python_only=python_only,
        toolchain_spec=toolchain.strip(),
        use_cuda=cuda,
        python_variants=tuple(variant for variant, on in requested if on),
        r_integration=r_integration,
        extra_definitions=tuple(define),
    )

    context = build_context()
    service = ConfigureService(
        layout=context.layout,
        platform=context.platform,
        config=context.config,
        console=context.console,
        ask=_ask,
        http=context.http,
    )

    match service.run(flags):
        case Ok(outcome):
            if outcome.exit_code:
                raise typer.Exit(code=outcome.exit_code)
            context.console.newline()
            if outcome.configured:
                context.console.success("Configure complete")
                for out_dir in outcome.configured:
                    context.console.print(f"  {out_dir}", Style.DIM)
            else:
                context.console.success("Done (build configuration skipped)")
        case Err(error):
            print_configure_error(error, context.console)
            raise typer.Exit(code=configure_error_exit_code(error))


def main() -> None:
    app()
