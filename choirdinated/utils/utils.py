from io import BytesIO
from PIL import Image

from django.core.files import File


def cropImage(imageFile, name, width, height):
    'Resize et bilde til width og height, og returne en (ulagret) JPEG file'
    bilde = Image.open(imageFile)

    # Fjern transparency
    bilde = bilde.convert('RGB')

    if bilde.width * height > bilde.height * width:
        # Height e den begrensende størrelsen
        cropHeight = bilde.height
        cropWidth = bilde.height * width / height
    else:
        cropWidth = bilde.width
        cropHeight = bilde.width * height / width

    # Klipp ut midta med rett proporsjoner
    left = (bilde.width - cropWidth) / 2
    top = (bilde.height - cropHeight) / 2
    bilde = bilde.crop((left, top, left + cropWidth, top + cropHeight))

    if bilde.height > height:
        bilde = bilde.resize((width, height))

    bildeBytes = BytesIO()
    bilde.save(bildeBytes, 'JPEG')

    if not name.lower().endswith(('.jpg', '.jpeg')):
        name = name.rsplit('.', 1)[0] + '.jpg'

    return File(bildeBytes, name=name)
