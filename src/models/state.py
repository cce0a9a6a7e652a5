"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the composition run (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the run progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, jspDir, genDirName,
          pageEncoding, minimize, skip
        - env_check: envOK
        - templates_compose: processResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Web content root scanned for template directories
        outputdir: Root under which generated directories are written
        verbosity: Logging verbosity level (1-3)
        jspDir: Path suffix identifying template directories
        genDirName: Name of the generated sibling directory
        pageEncoding: Optional charset override for reading, writing and
                      the pageEncoding attribute
        minimize: Strip blank lines from composed output
        skip: Do nothing (build-tool style skip flag)
        envOK: Environment validation passed
        processResult: Summary of the composition run
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    jspDir: str = field(default="/WEB-INF/__jsp")
    genDirName: str = field(default="jsp")
    pageEncoding: Optional[str] = field(default=None)
    minimize: bool = field(default=False)
    skip: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    processResult: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (jspDir, genDirName, etc.)
            inputdir: Web content root
            outputdir: Output root

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Filter options_dict to only include fields that exist in ProgramState
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            templates_compose,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
