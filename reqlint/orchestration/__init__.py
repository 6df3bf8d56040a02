from reqlint.orchestration.runner import LintRunner, exit_code, requirement_index

__all__ = ["LintRunner", "exit_code", "requirement_index"]
