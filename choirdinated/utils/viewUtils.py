import json
import logging

from django.core.exceptions import PermissionDenied
from django.forms import ValidationError
from django.http import Http404, JsonResponse

from choirdinated.models import Member

logger = logging.getLogger(__name__)

# Utils til bruk i og rundt views

class ApiError(Exception):
    'Raises i et view for å svare med {"error": message, "details": details} og status'
    def __init__(self, message, status=400, details=None):
        self.message = message
        self.status = status
        self.details = details
        super().__init__(message)


def jsonError(message, status, details=None):
    body = {'error': message}
    if details != None:
        body['details'] = details
    return JsonResponse(body, status=status)


def getRequestMember(user):
    '''
    Medlemmet vi bruker for å finne brukerens kor. Har brukeren flere medlemskap
    tar vi det første (etter pk) med en medlemskapstype som har tilgang til systemet.
    '''
    return Member.objects.filter(
        user=user,
        membershipType__canAccessSystem=True
    ).select_related('choir', 'membershipType').order_by('pk').first()


def checkRole(request, roles):
    'Raise PermissionDenied om request.member ikke har en av rollene'
    if request.member.membershipType.name not in roles:
        raise PermissionDenied('Insufficient permissions')


def parseJson(request):
    'Parse bodyen som JSON, tom body gir en tom dict'
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except json.JSONDecodeError:
        raise ApiError('Invalid JSON body')
    if not isinstance(data, dict):
        raise ApiError('Invalid JSON body')
    return data


def validateForm(formClass, data, **kwargs):
    'Returne et gyldig form, eller raise ApiError med feilene til formet'
    form = formClass(data, **kwargs)
    if not form.is_valid():
        raise ApiError('Validation failed', details=form.errors.get_json_data())
    return form


def apiTilgang(viewFunc=None, roles=None, public=False, methods=None):
    '''
    Decorator for API views. Sjekke at brukeren er logget inn og har et medlemskap,
    og setter request.member og request.choir. Koret finn vi alltid selv, vi stoler aldri
    på et choirId fra klienten.

    - roles er en liste av medlemskapstypenavn som har tilgang, se consts.adminRoles osv.
    - public=True hopper over innloggingssjekken, brukt av login og onboarding.
    - methods begrenser hvilke HTTP metoder viewet svarer på.

    Feil oversettes til JSON: ApiError og ValidationError gir 400, PermissionDenied gir 403,
    Http404 gir 404 og alt annet logges og gir 500 uten detaljer.
    '''

    if not viewFunc:
        return lambda func: apiTilgang(func, roles=roles, public=public, methods=methods)

    def _decorator(request, *args, **kwargs):
        if methods and request.method not in methods:
            return jsonError('Method not allowed', 405)

        if not public:
            if not request.user.is_authenticated:
                return jsonError('Not authenticated', 401)

            if not (member := getRequestMember(request.user)):
                return jsonError('User has no choir membership', 403)

            request.member = member
            request.choir = member.choir

        try:
            if roles:
                checkRole(request, roles)

            return viewFunc(request, *args, **kwargs)
        except ApiError as e:
            return jsonError(e.message, e.status, e.details)
        except ValidationError as e:
            return jsonError('Validation failed', 400, e.message_dict if hasattr(e, 'error_dict') else e.messages)
        except PermissionDenied as e:
            return jsonError(str(e) or 'Insufficient permissions', 403)
        except Http404 as e:
            return jsonError(str(e) or 'Not found', 404)
        except Exception:
            logger.exception(f'Uventet feil i {request.method} {request.path}')
            return jsonError('Internal server error', 500)

    _decorator.__name__ = viewFunc.__name__
    _decorator.__doc__ = viewFunc.__doc__
    return _decorator
