# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""AT-ST: automatic testing of student C solutions."""

__version__ = "0.3.0"
