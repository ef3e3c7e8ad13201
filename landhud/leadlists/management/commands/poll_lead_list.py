from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from landhud.leadlists.polling import HttpStatusFetcher, PollResult, StatusPoller


class Command(BaseCommand):
    help = "Poll one or more lead lists until they are ready, errored, or the attempt budget runs out"

    def add_arguments(self, parser):
        parser.add_argument("list_ids", nargs="+")
        parser.add_argument("--base-url", default=None, help="Defaults to APP_BASE_URL")
        parser.add_argument("--interval", type=float, default=None)
        parser.add_argument("--max-attempts", type=int, default=None)
        parser.add_argument("--initial-delay", type=float, default=None)

    def handle(self, *args, **options):
        base_url = options["base_url"] or settings.APP_BASE_URL
        fetch = HttpStatusFetcher(base_url)

        results = {}
        threads = []
        pollers = []
        for list_id in options["list_ids"]:
            poller = StatusPoller(
                fetch,
                interval=options["interval"],
                max_attempts=options["max_attempts"],
                initial_delay=options["initial_delay"],
                on_progress=self._progress_printer(list_id),
            )
            pollers.append(poller)
            threads.append(poller.run_in_background(list_id, on_done=lambda r, lid=list_id: results.__setitem__(lid, r)))

        try:
            for t in threads:
                t.join()
        except KeyboardInterrupt:
            for poller in pollers:
                poller.cancel()
            for t in threads:
                t.join()

        failed = []
        for list_id in options["list_ids"]:
            result = results.get(list_id)
            if result and result.outcome == PollResult.OUTCOME_READY:
                self.stdout.write(self.style.SUCCESS(f"{list_id}: {result.message}"))
            else:
                message = result.message if result else "no result"
                self.stdout.write(self.style.ERROR(f"{list_id}: {message}"))
                failed.append(list_id)

        if failed:
            raise CommandError(f"{len(failed)} lead list(s) not ready: {', '.join(failed)}")

    def _progress_printer(self, list_id):
        def _print(attempt, record, error):
            if error is not None:
                self.stdout.write(f"{list_id}: attempt {attempt} failed ({error})")
            else:
                self.stdout.write(f"{list_id}: attempt {attempt} status={record.get('status')}")
        return _print
