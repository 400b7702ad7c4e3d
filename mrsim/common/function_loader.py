#!/usr/bin/env python3
"""
Dynamic Function Loader for MapReduce Job Files
Loads a user-provided Python file defining map_function and reduce_function
"""

import importlib.util
import os
import sys


class FunctionLoader:
    """Dynamically loads user-provided map/reduce functions from Python files"""

    def __init__(self, job_file: str):
        """
        Initialize the function loader

        Args:
            job_file: Path to user's Python file containing map/reduce functions
        """
        self.job_file = job_file
        self.module = None

    @property
    def module_name(self) -> str:
        stem = os.path.splitext(os.path.basename(self.job_file))[0]
        return f"mrsim_job_{stem}"

    def load_module(self):
        """
        Dynamically load the job file

        Returns:
            The loaded module object

        Raises:
            FileNotFoundError: If the job file doesn't exist
            ImportError: If the file cannot be loaded as a Python module
        """
        if not os.path.exists(self.job_file):
            raise FileNotFoundError(f"Job file not found: {self.job_file}")

        spec = importlib.util.spec_from_file_location(self.module_name, self.job_file)
        if spec is None or spec.loader is None:
            raise ImportError(f"Failed to load job file: {self.job_file}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[self.module_name] = module
        spec.loader.exec_module(module)
        self.module = module
        return module

    def _get_function(self, name: str):
        if not self.module:
            self.load_module()

        func = getattr(self.module, name, None)
        if func is None:
            raise AttributeError(f"Job file must define '{name}'")
        if not callable(func):
            raise AttributeError(f"'{name}' in job file is not callable")
        return func

    def get_map_function(self):
        """
        Get map function from the job file

        Returns:
            The map_function callable: content -> iterable of (key, value)

        Raises:
            AttributeError: If the module doesn't define 'map_function'
        """
        return self._get_function('map_function')

    def get_reduce_function(self):
        """
        Get reduce function from the job file

        Returns:
            The reduce_function callable: (key, values) -> result

        Raises:
            AttributeError: If the module doesn't define 'reduce_function'
        """
        return self._get_function('reduce_function')
