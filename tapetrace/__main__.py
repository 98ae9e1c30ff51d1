# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
# author: Sławomir Liszniański; created: 2026-10-18
import sys

from tapetrace.cli import main

sys.exit(main())
