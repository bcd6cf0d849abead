"""
Django management command to run scheduler tasks
Usage: python manage.py run_scheduler_task <task_name>
"""

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.scheduler.tasks import SCHEDULED_TASKS, run_task


class Command(BaseCommand):
    help = "Run scheduled tasks manually"

    def add_arguments(self, parser):
        parser.add_argument(
            "task_name",
            nargs="?",
            type=str,
            help="Name of the task to run (optional, shows available tasks if not provided)",
        )
        parser.add_argument(
            "--list", action="store_true", help="List all available tasks"
        )

    def handle(self, *args, **options):
        task_name = options["task_name"]

        if options["list"] or not task_name:
            self.show_task_info()
            return

        if task_name not in SCHEDULED_TASKS:
            self.stdout.write(self.style.ERROR(f'Task "{task_name}" not found.'))
            self.show_task_info()
            return

        self.stdout.write(self.style.WARNING(f"Running task: {task_name}..."))

        start_time = timezone.now()
        result = run_task(task_name)
        duration = (timezone.now() - start_time).total_seconds()

        if result["success"]:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Task "{task_name}" completed successfully in {duration:.2f} seconds'
                )
            )
            self.stdout.write(f"Result: {result}")
        else:
            self.stdout.write(
                self.style.ERROR(
                    f'Task "{task_name}" failed: {result.get("error", "Unknown error")}'
                )
            )

    def show_task_info(self):
        self.stdout.write(
            self.style.SUCCESS(f"Available Scheduler Tasks ({len(SCHEDULED_TASKS)} total)")
        )
        for name, info in SCHEDULED_TASKS.items():
            self.stdout.write(f"  {name}")
            self.stdout.write(f'    Schedule: {info["schedule"]}')
            self.stdout.write(f'    Description: {info["description"]}')

        self.stdout.write(
            self.style.WARNING("Usage: python manage.py run_scheduler_task <task_name>")
        )
