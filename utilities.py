import inspect
import time
from datetime import datetime, timezone
import os

import psutil
from rich.console import Console
from rich.markup import escape

_stdout = Console(highlight=False)
_stderr = Console(stderr=True, highlight=False)

# Log types that belong on stderr
_ERROR_TYPES = {'FAILURE', 'CRITICAL', 'EXCEPTION'}

_debug_enabled = False


def set_debug(enabled: bool) -> None:
    """Show or hide DEBUG lines emitted through Print."""
    global _debug_enabled
    _debug_enabled = enabled


def debug_enabled() -> bool:
    return _debug_enabled


def Print(logType: str, message: str) -> None:
    """
    Prints a log message with timestamp, function name, symbols wrapping the logType, and the message.

    FAILURE, CRITICAL and EXCEPTION lines go to stderr. DEBUG lines are dropped
    unless set_debug(True) was called.
    """
    logTypeUpper = logType.upper()
    if logTypeUpper == 'DEBUG' and not _debug_enabled:
        return

    try:
        # Mapping of logType to symbols
        logTypeSymbols = {
            'SUCCESS': ('^^^', '^^^'),
            'FAILURE': ('###', '###'),
            'STATE': ('~~~', '~~~'),
            'INFO': ('---', '---'),
            'IMPORTANT': ('===', '==='),
            'CRITICAL': ('***', '***'),
            'EXCEPTION': ('!!!', '!!!'),
            'WARNING': ('(((', ')))'),
            'DEBUG': ('[[[', ']]]'),
            'ATTEMPT': ('???', '???'),
            'STARTING': ('>>>', '>>>'),
            'PROGRESS': ('vvv', 'vvv'),
            'COMPLETED': ('<<<', '<<<'),
            'HEADER': ('===', '==='),
        }

        # Mapping of logType to styles
        logTypeStyles = {
            'SUCCESS': 'green',
            'FAILURE': 'red bold',
            'STATE': 'cyan',
            'INFO': 'blue',
            'IMPORTANT': 'magenta',
            'CRITICAL': 'red bold',
            'EXCEPTION': 'red bold',
            'WARNING': 'yellow',
            'DEBUG': 'white',
            'ATTEMPT': 'cyan',
            'STARTING': 'green',
            'PROGRESS': 'blue',
            'COMPLETED': 'green',
            'HEADER': 'magenta bold',
        }

        current_time = time.time()
        timestamp = datetime.fromtimestamp(current_time, tz=timezone.utc).isoformat(timespec='microseconds').replace('+00:00', 'Z')

        before_symbol, after_symbol = logTypeSymbols.get(logTypeUpper, ('', ''))
        formattedLogType = f"{before_symbol} {logTypeUpper} {after_symbol}"

        style = logTypeStyles.get(logTypeUpper, '')
        if style:
            formattedLogType = f"[{style}]{formattedLogType}[/{style}]"

        # Get the caller function name
        caller_frame = inspect.stack()[1]
        function_name = caller_frame.function

        # If the caller is Print, get the next frame
        if function_name == 'Print':
            caller_frame = inspect.stack()[2]
            function_name = caller_frame.function

        functionNamePadding = 30
        paddedFunctionName = function_name.ljust(functionNamePadding)

        # Messages carry file paths and Pillow errors; keep brackets literal
        safe_message = escape(message)
        output_line = f"{timestamp} {formattedLogType} {paddedFunctionName} {safe_message}"

        console = _stderr if logTypeUpper in _ERROR_TYPES else _stdout
        console.print(output_line, soft_wrap=True)

    except Exception as e:
        error_message = f"Something went wrong when attempting to print.\nError: {e}"
        print(error_message)


def CPU_and_Mem_usage() -> str:
    """
    Returns a string with the CPU usage and memory usage of the current process.
    """
    current_process = psutil.Process(os.getpid())
    cpu_usage = current_process.cpu_percent(interval=0.1)
    memory_info = current_process.memory_info()
    memory_usage_mb = memory_info.rss / (1024 ** 2)
    return f"CPU Usage: {cpu_usage}%, Process Memory Usage: {memory_usage_mb:.2f} MB"
