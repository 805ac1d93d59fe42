"""
rmbg package
============

Contour based background removal for batches of photographs.  The
package follows the same simple MVC split as the rest of the tools:

- :mod:`rmbg.models` holds the image algorithms (edge detection,
  contour mask building, alpha compositing).
- :mod:`rmbg.controllers` drives them: the per-file pipeline, the
  fork-join batch partitioner and the command-line entry point.
- :mod:`rmbg.views` writes the resulting images to disk.
- :mod:`rmbg.utils` provides configuration and input/output helpers.
"""

from . import models  # re-export model submodule

__all__ = ["models"]

__version__ = "0.1.0"
