"""Service layer — operations over a configured :class:`~folio.infrastructure.site.Site`.

Every public service method returns a
:class:`~folio.services.result.ServiceResult`; fatal
:class:`~folio.domain.errors.FolioError` exceptions are converted at this
boundary so the CLI never sees a traceback for an expected failure.
"""
