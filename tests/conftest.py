"""Shared fixtures: stand-in compiler executables and sample documents."""

import sys
import textwrap
from pathlib import Path

import pytest

VALID_DOC = r"""\documentclass{article}
\begin{document}
Hello, preview.
\end{document}
"""

# Unmatched brace on line 3
BROKEN_DOC = r"""\documentclass{article}
\begin{document}
\textbf{never closed
\end{document}
"""

FAKE_PDFLATEX = r"""
import sys
from pathlib import Path

args = sys.argv[1:]
out_dir = Path(args[args.index("-output-directory") + 1])
jobname = next(a.split("=", 1)[1] for a in args if a.startswith("-jobname="))
source = Path(args[-1])
text = source.read_text()

print("This is pdfTeX (fake)")
print("entering extended mode")
sys.stderr.write("kpathsea: fake stderr\n")

if text.count("{") != text.count("}"):
    (out_dir / (jobname + ".log")).write_text("! Missing } inserted.\nl.3 \\textbf{never closed\n")
    print("! Missing } inserted.")
    print("No pages of output.")
    print("Transcript written on " + jobname + ".log.")
    print("")
    sys.exit(1)

(out_dir / (jobname + ".pdf")).write_bytes(b"%PDF-1.4\n%%EOF\n")
(out_dir / (jobname + ".log")).write_text("LaTeX Warning: Reference undefined.\n")
print("Output written on " + jobname + ".pdf (1 page).")
"""

FAKE_TECTONIC = r"""
import sys
from pathlib import Path

args = sys.argv[1:]
out_dir = Path(args[args.index("--outdir") + 1])
source = Path(args[-1])
text = source.read_text()

print("note: Running TeX ...")

if text.count("{") != text.count("}"):
    sys.stderr.write("error: " + source.name + ":3: Missing } inserted.\n")
    sys.stderr.write("error: halted on potentially-recoverable error as specified\n")
    sys.exit(1)

(out_dir / (source.stem + ".pdf")).write_bytes(b"%PDF-1.4\n%%EOF\n")
sys.stderr.write("note: Writing `" + source.stem + ".pdf`\n")
"""

HANGING_COMPILER = r"""
import time

print("starting", flush=True)
time.sleep(30)
"""


@pytest.fixture
def make_executable(tmp_path):
    """Write a Python script with a shebang line and make it executable."""
    if sys.platform == "win32":
        pytest.skip("shebang scripts are not executable on Windows")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        script.chmod(0o755)
        return script

    return _make


@pytest.fixture
def doc_dir(tmp_path) -> Path:
    directory = tmp_path / "doc"
    directory.mkdir()
    return directory


@pytest.fixture
def valid_tex(doc_dir) -> Path:
    source = doc_dir / "thesis.tex"
    source.write_text(VALID_DOC)
    return source


@pytest.fixture
def broken_tex(doc_dir) -> Path:
    source = doc_dir / "broken.tex"
    source.write_text(BROKEN_DOC)
    return source


@pytest.fixture
def fake_pdflatex(make_executable) -> Path:
    return make_executable("pdflatex", FAKE_PDFLATEX)


@pytest.fixture
def fake_tectonic(make_executable) -> Path:
    return make_executable("tectonic", FAKE_TECTONIC)


@pytest.fixture
def hanging_compiler(make_executable) -> Path:
    return make_executable("pdflatex", HANGING_COMPILER)
