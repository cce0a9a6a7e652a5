"""
Tree processor: finds template directories and writes generated output

For an input root such as

    WebContent/
      WEB-INF/
        __jsp/
          __config/        layouts (main.jsp) and variable files
          index.jsp
          css/site.css

every template directory (path ending in jsp_dir, "/WEB-INF/__jsp" by
default) is mirrored into a generated sibling directory:

    <outputdir>/WEB-INF/jsp/index.jsp
    <outputdir>/WEB-INF/jsp/index_inc.jsp
    <outputdir>/WEB-INF/jsp/css/site.css

Template documents are composed by PageCompiler; every other file is
copied unchanged. The config directory is never copied.
"""

import shutil
from collections import deque
from pathlib import Path
from typing import List, Optional

from ..config import AppSettings, appsettings
from ..models.document import LineBuffer
from ..models.results import ProcessResult
from .cache import LayoutCache
from .compiler import PageCompiler
from .log import LOG


class TreeProcessor:
    """
    Processes every template directory found under an input root

    One LayoutCache is shared by all pages of a run.
    """

    def __init__(
        self,
        inputdir: Path,
        outputdir: Optional[Path] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Args:
            inputdir: Root scanned for template directories
            outputdir: Root for generated directories (defaults to inputdir,
                       generating in place)
            settings: Settings to use (defaults to the appsettings singleton)
        """
        self.inputdir = Path(inputdir)
        self.outputdir = Path(outputdir) if outputdir is not None else self.inputdir
        self.settings = settings or appsettings
        self.encoding = self.settings.encoding_resolve()
        self.cache = LayoutCache()

        if not self.inputdir.is_dir():
            raise NotADirectoryError(f"Input directory is invalid: {self.inputdir}")

    def process(self) -> ProcessResult:
        """
        Compose every template directory under the input root

        Layouts are read afresh on every call.

        Returns:
            ProcessResult summarizing the run

        Raises:
            CompositionError: First markup violation found (aborts the run)
            OSError: On any read or write failure
            UnicodeDecodeError: If a document is not valid in the page encoding
        """
        self.cache.clear()
        result = ProcessResult()
        for jsp_dir in self.jspDirs_find():
            genDir = self.genDir_get(jsp_dir)
            if genDir.exists():
                LOG(f"Removing previous output {genDir}", level=2)
                shutil.rmtree(genDir)
            self.jspDir_process(jsp_dir, genDir, result)
            result.templateDirs.append(jsp_dir)
        return result

    def jspDirs_find(self) -> List[Path]:
        """
        Breadth-first search for template directories

        A directory matches when its POSIX path ends with jsp_dir. The
        search does not descend into matches.
        """
        suffix = "/" + self.settings.jsp_dir.strip("/")
        found: List[Path] = []
        queue = deque([self.inputdir])
        while queue:
            directory = queue.popleft()
            if directory.resolve().as_posix().endswith(suffix):
                found.append(directory)
                continue
            queue.extend(sorted(child for child in directory.iterdir() if child.is_dir()))
        LOG(f"Found {len(found)} template director(ies) under {self.inputdir}", level=2)
        return found

    def genDir_get(self, jsp_dir: Path) -> Path:
        """Generated directory for a template directory"""
        if jsp_dir == self.inputdir:
            return self.outputdir / self.settings.gen_dir_name
        relative = jsp_dir.parent.relative_to(self.inputdir)
        return self.outputdir / relative / self.settings.gen_dir_name

    def jspDir_process(self, jsp_dir: Path, genDir: Path, result: ProcessResult) -> None:
        """Compose or copy every file of one template directory"""
        config_dir = jsp_dir / self.settings.config_dir_name
        compiler = PageCompiler(config_dir, cache=self.cache, settings=self.settings)
        skipped = {config_dir.resolve(), genDir.resolve()}

        queue = deque([jsp_dir])
        while queue:
            current = queue.popleft()
            if current.resolve() in skipped:
                continue
            if current.is_dir():
                queue.extend(sorted(current.iterdir()))
                continue
            if not current.is_file():
                continue

            target = genDir / current.relative_to(jsp_dir)
            target.parent.mkdir(parents=True, exist_ok=True)

            if current.name.lower().endswith(self.settings.template_extension.lower()):
                self.page_compose(compiler, current, target, result)
            else:
                shutil.copyfile(current, target)
                result.filesCopied += 1
                result.written.append(target)
                LOG(f"Copied {current.relative_to(jsp_dir)}", level=3)

    def page_compose(
        self, compiler: PageCompiler, page_file: Path, target: Path, result: ProcessResult
    ) -> None:
        """Compose one template document and write its output documents"""
        LOG(f"Composing {page_file.name}", level=2)
        source = LineBuffer.text_parse(page_file.read_text(encoding=self.encoding))
        documents = compiler.compile(page_file.name, source)

        for document in documents:
            output_file = target.parent / document.name
            output_file.write_text(
                document.source.text_render(self.settings.line_separator),
                encoding=self.encoding,
                newline="",
            )
            result.written.append(output_file)
        result.pagesComposed += 1
        if len(documents) > 1:
            result.includesWritten += 1
        LOG(f"Composed {page_file.name} -> {', '.join(d.name for d in documents)}", level=1)
