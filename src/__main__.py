#!/usr/bin/env python3
"""
jspcompose - Build-time JSP layout composer

Composes JSP page templates with shared layouts ahead of time, so the
generated pages need no runtime templating engine.

Philosophy:
    - Comment markup: directives live in <!-- @... --> comments, so templates
      stay valid JSP
    - Line based: documents are rewritten line by line, everything the
      engine does not recognize is copied through untouched
    - Fail fast: any markup violation aborts the run

Markup:
    <!-- @variables: site.properties -->     import variables
    <!-- @variable title=Home -->            declare a variable
    <!-- @variables                          declare a block of variables
    __layout=main
    -->
    <!-- @header begin --> ... <!-- @header end -->   define a section
    <!-- @doBody -->   <!-- @header -->   <!-- @scripts? -->   (in layouts)
    @{title}  @(title)                       placeholders

Usage:
    jspcompose inputdir/ outputdir/

    Every directory under inputdir ending in --jspDir (/WEB-INF/__jsp) is
    generated into a --genDirName (jsp) sibling under outputdir.

Examples:
    # Generate in place
    jspcompose WebContent/ WebContent/

    # Custom directories, enforced encoding, minimized output
    jspcompose src/ build/ --jspDir /WEB-INF/templates --genDirName views \\
        --pageEncoding UTF-8 --minimize

    # Verbose output
    jspcompose WebContent/ WebContent/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import AppSettings, appsettings
from .lib import TreeProcessor, CompositionError, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
   _
  (_)___ _ __   ___ ___  _ __ ___  _ __   ___  ___  ___
  | / __| '_ \ / __/ _ \| '_ ` _ \| '_ \ / _ \/ __|/ _ \
  | \__ \ |_) | (_| (_) | | | | | | |_) | (_) \__ \  __/
 _/ |___/ .__/ \___\___/|_| |_| |_| .__/ \___/|___/\___|
|__/    |_|                       |_|

  Build-time JSP layout composer
"""

# Define CLI arguments
parser = ArgumentParser(
    description="jspcompose - Build-time JSP layout composer",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--jspDir",
    default=appsettings.jsp_dir,
    type=str,
    help="Path suffix identifying template directories under inputdir",
)

parser.add_argument(
    "--genDirName",
    default=appsettings.gen_dir_name,
    type=str,
    help="Name of the generated directory written beside each template directory",
)

parser.add_argument(
    "--pageEncoding",
    default=appsettings.page_encoding,
    type=str,
    help="Charset for reading/writing templates, enforced as pageEncoding",
)

parser.add_argument(
    "--minimize",
    action="store_true",
    default=appsettings.minimize,
    help="Strip blank lines from composed output",
)

parser.add_argument(
    "--skip",
    action="store_true",
    default=False,
    help="Skip processing entirely",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def settings_fromState(state: ProgramState) -> AppSettings:
    """Application settings with the CLI options applied"""
    return appsettings.model_copy(update={
        "jsp_dir": state.jspDir,
        "gen_dir_name": state.genDirName,
        "page_encoding": state.pageEncoding,
        "minimize": state.minimize,
    })


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the input directory and the document encoding.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added field:
            - envOK: True if environment is valid

    Exits:
        1 if inputdir does not exist or the page encoding is unknown
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.skip:
        LOG("Skip flag is on, will skip processing.", level=1)
        return state

    if not state.inputdir or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    try:
        encoding = settings_fromState(state).encoding_resolve()
    except LookupError:
        print(f"Error: Unknown page encoding: {state.pageEncoding}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"webContentDir: {state.inputdir}", level=1)
    LOG(f"jspDir: {state.jspDir}", level=1)
    LOG(f"genDirName: {state.genDirName}", level=1)
    LOG(f"pageEncoding: {state.pageEncoding} (documents read as {encoding})", level=1)
    LOG(f"minimize: {state.minimize}", level=1)

    state.envOK = True
    return state


def templates_compose(inputstate: ProgramState) -> ProgramState:
    """
    Compose every template directory under inputdir.

    Args:
        inputstate: Program state with a validated environment

    Returns:
        ProgramState with added field:
            - processResult: Dict containing:
                - status: bool
                - template_dirs: list of processed template directories
                - pages_composed, includes_written, files_copied: counts

    Exits:
        1 on any composition, decoding or I/O error
    """

    state = inputstate.copy()
    if not state.envOK:
        return state

    LOG("Composing templates...", level=1)

    try:
        processor = TreeProcessor(state.inputdir, state.outputdir, settings=settings_fromState(state))
        state.processResult = processor.process().summary_make()
    except CompositionError as e:
        print(f"Composition error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    except Exception as e:
        # undecodable documents, malformed import files
        print(f"Composition error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display a summary of the run.

    Args:
        inputstate: Program state with processResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)
    """
    state: ProgramState = inputstate.copy()
    if not state.envOK:
        return state
    if not state.processResult:
        print("Error: Composition failed", file=sys.stderr)
        sys.exit(1)

    result = state.processResult
    if not result['template_dirs']:
        LOG(f"No directory ending in {state.jspDir} found under {state.inputdir}", level=1)

    LOG("\n✓ Composition successful!", level=1)
    LOG(f"  Template dirs: {len(result['template_dirs'])}", level=1)
    LOG(f"  Pages composed: {result['pages_composed']}", level=1)
    LOG(f"  Body includes: {result['includes_written']}", level=1)
    LOG(f"  Files copied: {result['files_copied']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="jspcompose - Build-time JSP layout composer",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - compose every template directory under inputdir.

    Orchestrates the run:
        1. env_check: Validate paths and the page encoding
        2. templates_compose: Compose templates, copy other files
        3. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Web content root containing template directories
        outputdir: Root for generated directories

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, templates_compose, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
