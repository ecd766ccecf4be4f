"""
This module holds all of the command classes for kubemanifest's main entrypoint
"""

# Local
from .base import CmdBase
from .import_crd_cmd import ImportCrdCmd
from .kinds_cmd import KindsCmd
from .render_cmd import RenderCmd
