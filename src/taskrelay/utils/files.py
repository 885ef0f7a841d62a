import json
from pathlib import Path

from pydantic import TypeAdapter

from taskrelay.models import Instruction

instruction_list_adapter = TypeAdapter(list[Instruction])


def read_jsonl_file(file_path: str | Path) -> list[dict]:
    """Read a JSONL file and return the JSON objects it contains, skipping blank lines

    Args:
        file_path (str | Path): The path to the file to read
    """
    with open(file_path, "r") as f:
        return [json.loads(line) for line in f.readlines() if line.strip()]


def read_instructions_file(file_path: str | Path) -> list[dict]:
    """Read instructions from a JSON array file or a JSONL file

    Args:
        file_path (str | Path): The path to the file to read

    Returns:
        list[dict]: Validated instructions, in file order
    """
    with open(file_path, "r") as f:
        content = f.read()
    if not content.strip():
        raise ValueError(f"Instructions file '{file_path}' is empty")
    if content.lstrip().startswith("["):
        raw_instructions = json.loads(content)
    else:
        raw_instructions = read_jsonl_file(file_path)
    instructions = instruction_list_adapter.validate_python(raw_instructions)
    if not instructions:
        raise ValueError(f"Instructions file '{file_path}' contains no instructions")
    return [instruction.model_dump(exclude_none=True) for instruction in instructions]
