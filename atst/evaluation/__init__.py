# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
AT-ST evaluation package.

This is the system that answers the only question that matters:
"How many points does each solution get?"

Subsystems:
  - models: the Solution record, tests and test cases
  - process: bounded execution of external commands
  - analysers: static checks with a penalty
  - modules: the pipeline steps (compile, parse, test, analyse, scripts)
  - factory: building the modules from the project config
  - pipeline: discovering solutions and running the modules on them
  - reporting: progress lines and the JSON results report
"""
