import uuid

import factory
from factory.django import DjangoModelFactory

from showcase.exhibits.constants import ResourceKind
from showcase.exhibits.models import AboutPage
from showcase.exhibits.models import Attachment
from showcase.exhibits.models import Contact
from showcase.exhibits.models import ContactEmail
from showcase.exhibits.models import CustomField
from showcase.exhibits.models import DocumentSidecar
from showcase.exhibits.models import Exhibit
from showcase.exhibits.models import FeaturePage
from showcase.exhibits.models import Resource
from showcase.exhibits.models import Search
from showcase.exhibits.models import Tag
from showcase.exhibits.models import Tagging


class ExhibitFactory(DjangoModelFactory):
    class Meta:
        model = Exhibit

    title = factory.Sequence(lambda n: f"Exhibit {n}")
    subtitle = "A curated collection"
    description = "Maps, atlases and charts."
    published = True


class SearchFactory(DjangoModelFactory):
    class Meta:
        model = Search

    exhibit = factory.SubFactory(ExhibitFactory)
    title = factory.Sequence(lambda n: f"Browse category {n}")
    published = True
    query_params = factory.LazyFunction(dict)


class AboutPageFactory(DjangoModelFactory):
    class Meta:
        model = AboutPage

    exhibit = factory.SubFactory(ExhibitFactory)
    title = factory.Sequence(lambda n: f"About {n}")
    published = True
    content = factory.LazyFunction(lambda: [{"type": "text", "text": "Hello"}])


class FeaturePageFactory(DjangoModelFactory):
    class Meta:
        model = FeaturePage

    exhibit = factory.SubFactory(ExhibitFactory)
    title = factory.Sequence(lambda n: f"Feature {n}")
    published = True


class CustomFieldFactory(DjangoModelFactory):
    class Meta:
        model = CustomField

    exhibit = factory.SubFactory(ExhibitFactory)
    label = factory.Sequence(lambda n: f"Field {n}")


class ContactFactory(DjangoModelFactory):
    class Meta:
        model = Contact

    exhibit = factory.SubFactory(ExhibitFactory)
    name = factory.Faker("name")
    email = factory.Faker("email")


class ContactEmailFactory(DjangoModelFactory):
    class Meta:
        model = ContactEmail

    exhibit = factory.SubFactory(ExhibitFactory)
    email = factory.Sequence(lambda n: f"curator{n}@example.org")


class DocumentSidecarFactory(DjangoModelFactory):
    class Meta:
        model = DocumentSidecar

    exhibit = factory.SubFactory(ExhibitFactory)
    document_id = factory.Sequence(lambda n: f"doc-{n}")
    public = True


class TagFactory(DjangoModelFactory):
    class Meta:
        model = Tag
        django_get_or_create = ["name"]

    name = factory.Sequence(lambda n: f"tag-{n}")


class TaggingFactory(DjangoModelFactory):
    class Meta:
        model = Tagging

    exhibit = factory.SubFactory(ExhibitFactory)
    tag = factory.SubFactory(TagFactory)
    taggable_id = factory.Sequence(lambda n: f"doc-{n}")


class AttachmentFactory(DjangoModelFactory):
    class Meta:
        model = Attachment

    exhibit = factory.SubFactory(ExhibitFactory)
    uid = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Attachment {n}")


class ResourceFactory(DjangoModelFactory):
    class Meta:
        model = Resource

    exhibit = factory.SubFactory(ExhibitFactory)
    uid = factory.LazyFunction(uuid.uuid4)
    type = ResourceKind.URL
    url = factory.Sequence(lambda n: f"https://example.org/items/{n}")
