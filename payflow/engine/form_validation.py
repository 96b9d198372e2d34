"""
Client-side checks for form answers, with categorized problems.

Before submitting a form action we verify, per declared input:
  1. Mandatory inputs have an answer
  2. Text answers respect the length bounds
  3. Text answers match every declared regex
  4. Select answers name one of the offered options

and flag answers for inputs the form never asked for. This only saves a
round trip: the response to the submission stays the authority on validity.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence, Union

from payflow.models.authorization_flow import AdditionalInput, SelectInput, TextInput, TextWithImageInput
from payflow.models.enums import InputProblem

logger = logging.getLogger("payflow.form_validation")


@dataclass
class FormInputProblem:
    input_id: str
    reason: InputProblem
    message: str = ""


@dataclass
class FormValidationResult:
    """Result of validating a set of form answers."""

    problems: list[FormInputProblem] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.problems


def _check_text(input_: Union[TextInput, TextWithImageInput], answer: str) -> Optional[FormInputProblem]:
    if len(answer) < input_.min_length:
        return FormInputProblem(
            input_.id, InputProblem.TOO_SHORT, f"At least {input_.min_length} characters required"
        )
    if len(answer) > input_.max_length:
        return FormInputProblem(
            input_.id, InputProblem.TOO_LONG, f"At most {input_.max_length} characters allowed"
        )
    for rule in input_.regexes:
        try:
            matched = re.search(rule.regex, answer)
        except re.error:
            logger.debug("Skipping unparseable regex for input %s: %r", input_.id, rule.regex)
            continue
        if not matched:
            return FormInputProblem(input_.id, InputProblem.REGEX_MISMATCH, rule.message.default)
    return None


def validate_form_inputs(
    inputs: Sequence[AdditionalInput],
    answers: Mapping[str, str],
) -> FormValidationResult:
    """
    Validate answers against the inputs of a form action.

    Args:
        inputs: The ``inputs`` of the last ``FormAction`` presented.
        answers: Mapping of input id to the user's answer.

    Returns:
        FormValidationResult listing one problem per offending input.
    """
    result = FormValidationResult()
    declared = {input_.id for input_ in inputs}

    for input_ in inputs:
        answer = answers.get(input_.id)

        if not answer:
            if input_.mandatory:
                result.problems.append(
                    FormInputProblem(input_.id, InputProblem.MISSING_MANDATORY, "An answer is required")
                )
            continue

        if isinstance(input_, SelectInput):
            if answer not in {option.id for option in input_.options}:
                result.problems.append(
                    FormInputProblem(input_.id, InputProblem.UNKNOWN_OPTION, f"Unknown option: {answer}")
                )
            continue

        problem = _check_text(input_, answer)
        if problem:
            result.problems.append(problem)

    for input_id in answers:
        if input_id not in declared:
            result.problems.append(
                FormInputProblem(input_id, InputProblem.UNKNOWN_INPUT, "The form did not ask for this input")
            )

    return result
