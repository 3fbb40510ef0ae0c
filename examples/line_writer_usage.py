"""examples/line_writer_usage.py - Route stream output into tagged log lines.

``make_line_writer`` wraps a log method as a binary stream, so anything that
writes to a stream can feed the log. Here a child process's stdout is copied
into info lines and its stderr into warning lines, all tagged ctx="backup".

Run:
    python examples/line_writer_usage.py
"""

import io
import shutil
import subprocess
import sys

import contrail

log = contrail.new_writer("backup", sys.stdout).new_trace(contrail.new_trace_id())

if __name__ == "__main__":
    proc = subprocess.Popen(
        [sys.executable, "-c", "import sys; print('copied 3 files'); print('skipped lock', file=sys.stderr)"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    out, err = proc.communicate()

    # Each write() is split on newlines; one log call per line.
    contrail.make_line_writer(log.info).write(out.rstrip(b"\n"))
    contrail.make_line_writer(log.warning).write(err.rstrip(b"\n"))

    # LineWriter is an io.RawIOBase, so stream helpers accept it too.
    shutil.copyfileobj(io.BytesIO(b"step 1 done\nstep 2 done"), contrail.make_line_writer(log.info))
