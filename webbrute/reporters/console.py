from colorama import init as colorama_init, Fore, Style
from datetime import datetime
colorama_init(autoreset=True)


class Log:
    def __init__(self, verbose: int = 1):
        self.verbose = verbose
        self.WORD = Fore.MAGENTA

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def info(self, msg: str):
        if self.verbose >= 1:
            print(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 1:
            print(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        print(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        print(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            print(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def verdict(self, word: str, verdict):
        # one line per wordlist entry, printed at any verbosity
        col = Fore.GREEN if verdict == "SUCCESS" else Fore.RED
        print(f"{self.WORD}{word}{Style.RESET_ALL}\t\t\t\t"
              f"{col}{verdict.value}{Style.RESET_ALL}")

    def summary(self, total: int, successes: int, elapsed: float):
        msg = (f"{total} entries, {successes} success, "
               f"{total - successes} failed in {elapsed:.1f}s")
        if successes:
            self.ok(msg)
        else:
            self.info(msg)
