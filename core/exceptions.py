class CodegenException(Exception):
    def __init__(self, message: str, error_code: str = "CODEGEN-GENERIC"):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class InvalidConfigException(CodegenException):
    def __init__(self, field: str = None, reason: str = "Format not recognized"):
        self.field = field
        if field:
            msg = f"Configuration invalid at '{field}': {reason}"
        else:
            msg = f"Configuration invalid: {reason}"

        super().__init__(msg, error_code="CODEGEN-CFG-001")


class GenerationError(CodegenException):
    def __init__(self, stage: str, details: str, ref: str = None):
        self.stage = stage
        self.ref = ref
        msg = f"Failure during {stage}: {details}"
        if ref:
            msg += f" (Offending id: {ref})"

        super().__init__(msg, error_code="CODEGEN-GEN-001")


class RunNotFoundException(CodegenException):
    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Generation run '{run_id}' not found", error_code="CODEGEN-RUN-404")
