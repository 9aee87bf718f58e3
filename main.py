from dataclasses import dataclass

from rich import print

from argbind import flag, run_and_finish


@dataclass
class App:
    first_name: str = flag("John", usage="your first name", aliases="fn")
    last_name: str = flag("Doe", usage="your last name", aliases="ln")
    age: int = flag(-1, usage="your age")

    def run(self, args):
        print(f"Hello [bold]{self.first_name} {self.last_name}[/bold] ({self.age})")


if __name__ == '__main__':
    run_and_finish(App())
